"""Optional advisory predictions for alert enrichment."""

from plantguard.prediction.exceptions import PredictionError
from plantguard.prediction.service import (
    Advisor,
    GeminiPredictionService,
    HeuristicPredictor,
    Prediction,
    PredictionService,
    build_prompt,
    create_advisor,
    parse_prediction,
)

__all__ = [
    "Advisor",
    "GeminiPredictionService",
    "HeuristicPredictor",
    "Prediction",
    "PredictionError",
    "PredictionService",
    "build_prompt",
    "create_advisor",
    "parse_prediction",
]
