"""
Prediction runtime and feature extraction
"""
from projectpilot.ml.runtime import (
    METHOD_HEURISTIC,
    METHOD_ML,
    PredictionRuntime,
    load_prediction_runtime,
)

__all__ = ["METHOD_HEURISTIC", "METHOD_ML", "PredictionRuntime", "load_prediction_runtime"]
