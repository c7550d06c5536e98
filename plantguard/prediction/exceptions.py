"""Prediction service exceptions."""

from __future__ import annotations


class PredictionError(Exception):
    """The prediction service failed or returned an unusable reply."""
