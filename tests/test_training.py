"""
Model training tests
"""
import pytest

pytest.importorskip("sklearn")

from projectpilot.ml.runtime import (  # noqa: E402
    CATEGORY_MODEL_FILE,
    DEPENDENCY_MODEL_FILE,
    DURATION_MODEL_FILE,
)
from projectpilot.ml.training import save_models, train_models  # noqa: E402


@pytest.fixture(scope="module")
def models():
    return train_models(seed=3)


def test_trained_models_match_feature_shapes(models):
    duration = models[DURATION_MODEL_FILE].predict([[1, 0, 0, 0.0, 0.2, 0.1]])
    category = models[CATEGORY_MODEL_FILE].predict_proba([[0.5, 0.5, 0.3, 0.2, 0.1]])
    dependency = models[DEPENDENCY_MODEL_FILE].predict([[0.4, 0.3, 0.2, 0.1, 0.2, 0.3]])

    assert duration[0] > 0
    assert len(category[0]) == 3
    assert set(models[CATEGORY_MODEL_FILE].classes_) == {"development", "marketing", "general"}
    assert 0 <= dependency[0] <= 1


def test_save_models_writes_every_artifact(models, tmp_path):
    paths = save_models(models, str(tmp_path / "ai"))

    assert sorted(p.name for p in paths) == sorted([DURATION_MODEL_FILE, CATEGORY_MODEL_FILE, DEPENDENCY_MODEL_FILE])
    assert all(p.exists() for p in paths)
