"""
Prediction method selection.

The runtime is resolved once during application startup. When the model
libraries and all trained artifacts load, every AI service uses the model path;
otherwise the whole process stays on the heuristic path until restart.
"""
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

METHOD_ML = "ml"
METHOD_HEURISTIC = "heuristic"

DURATION_MODEL_FILE = "duration_model.joblib"
CATEGORY_MODEL_FILE = "category_model.joblib"
DEPENDENCY_MODEL_FILE = "dependency_model.joblib"


class PredictionRuntime:
    """Holds the loaded models; read-only once constructed."""

    def __init__(
        self,
        duration_model: Optional[Any] = None,
        category_model: Optional[Any] = None,
        dependency_model: Optional[Any] = None,
        model_dir: Optional[str] = None,
    ):
        self._duration_model = duration_model
        self._category_model = category_model
        self._dependency_model = dependency_model
        self._model_dir = model_dir

    @property
    def duration_model(self):
        return self._duration_model

    @property
    def category_model(self):
        return self._category_model

    @property
    def dependency_model(self):
        return self._dependency_model

    @property
    def model_dir(self) -> Optional[str]:
        return self._model_dir

    @property
    def uses_model(self) -> bool:
        return all(
            model is not None
            for model in (self._duration_model, self._category_model, self._dependency_model)
        )

    @property
    def method(self) -> str:
        return METHOD_ML if self.uses_model else METHOD_HEURISTIC

    def __repr__(self):
        return f"<PredictionRuntime(method={self.method})>"


def load_prediction_runtime(settings) -> PredictionRuntime:
    """Try to acquire the model runtime; fall back to heuristics on any failure."""
    if not settings.ai_model_enabled:
        logger.info("AI models disabled by configuration, using heuristic predictions")
        return PredictionRuntime()

    model_dir = Path(settings.ai_model_dir)
    try:
        import joblib

        models = {}
        for name in (DURATION_MODEL_FILE, CATEGORY_MODEL_FILE, DEPENDENCY_MODEL_FILE):
            path = model_dir / name
            if not path.exists():
                raise FileNotFoundError(f"Model artifact missing: {path}")
            models[name] = joblib.load(path)
    except Exception as e:
        logger.warning(f"Model runtime unavailable, using heuristic fallback instead: {e}")
        return PredictionRuntime(model_dir=str(model_dir))

    logger.info(f"Prediction models loaded from {model_dir}")
    return PredictionRuntime(
        duration_model=models[DURATION_MODEL_FILE],
        category_model=models[CATEGORY_MODEL_FILE],
        dependency_model=models[DEPENDENCY_MODEL_FILE],
        model_dir=str(model_dir),
    )
