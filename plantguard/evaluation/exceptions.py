"""Evaluation exceptions."""

from __future__ import annotations


class EvaluationError(Exception):
    """A snapshot could not be evaluated (e.g. routed to the wrong evaluator)."""
