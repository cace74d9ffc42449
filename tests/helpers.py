"""
Test doubles and a fixed clock
"""
from datetime import datetime, timezone

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock():
    return NOW


class FixedRegressor:
    """Stands in for a trained regressor"""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def predict(self, rows):
        self.calls.append(rows)
        return [self.value for _ in rows]


class FixedClassifier:
    """Stands in for a trained classifier"""

    classes_ = ['development', 'general', 'marketing']

    def __init__(self, probabilities):
        self.probabilities = probabilities

    def predict_proba(self, rows):
        return [list(self.probabilities) for _ in rows]


class BrokenModel:
    classes_ = ['development', 'general', 'marketing']

    def predict(self, rows):
        raise ValueError("model exploded")

    def predict_proba(self, rows):
        raise ValueError("model exploded")
