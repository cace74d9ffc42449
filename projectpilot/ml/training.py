"""
Train the prediction models on synthetic data and save them for the runtime.

Usage:
  python -m projectpilot.ml.training --output models/ai
"""
import argparse
import logging
from pathlib import Path
from typing import Dict, List, Tuple

import joblib
import numpy as np
from sklearn.ensemble import RandomForestRegressor
from sklearn.neural_network import MLPClassifier

from projectpilot.ml.features import (
    PRIORITY_LEVELS,
    PROJECT_STATUS_MAP,
    TASK_STATUS_MAP,
    normalize_value,
)
from projectpilot.ml.runtime import CATEGORY_MODEL_FILE, DEPENDENCY_MODEL_FILE, DURATION_MODEL_FILE

logger = logging.getLogger(__name__)

PROJECT_CATEGORIES = ('development', 'marketing', 'general')

BASE_DAYS = {'high': 3.0, 'medium': 5.0, 'low': 7.0}
STATUS_MULTIPLIER = {'todo': 1.0, 'in-progress': 0.7, 'review': 0.3, 'completed': 1.0}


def generate_category_samples(rng: np.random.Generator, per_category: int = 100) -> Tuple[List[List[float]], List[str]]:
    """Random project scenarios, nudged towards each category's typical shape"""
    features, labels = [], []
    statuses = list(PROJECT_STATUS_MAP)
    for category in PROJECT_CATEGORIES:
        for _ in range(per_category):
            status = statuses[rng.integers(len(statuses))]
            progress = float(rng.random())
            days_remaining = int(rng.integers(1, 101))
            team_size = int(rng.integers(1, 11))
            task_count = int(rng.integers(0, 31))

            if category == 'development':
                # larger teams, more tasks
                team_size = min(team_size + 2, 10)
                task_count = min(task_count + 5, 30)
            elif category == 'marketing':
                # shorter timelines
                days_remaining = max(1, days_remaining - 20)

            features.append([
                PROJECT_STATUS_MAP[status],
                progress,
                normalize_value(days_remaining, 0, 100),
                normalize_value(team_size, 1, 10),
                normalize_value(task_count, 0, 30),
            ])
            labels.append(category)
    return features, labels


def generate_duration_samples(rng: np.random.Generator, count: int = 600) -> Tuple[List[List[float]], List[float]]:
    features, targets = [], []
    statuses = list(TASK_STATUS_MAP)
    for _ in range(count):
        priority = PRIORITY_LEVELS[rng.integers(len(PRIORITY_LEVELS))]
        status = statuses[rng.integers(len(statuses))]
        title_len = float(rng.random())
        desc_len = float(rng.random())

        days = BASE_DAYS[priority] * STATUS_MULTIPLIER[status] * (1 + 0.3 * desc_len)
        days = max(0.5, days + float(rng.normal(0, 0.3)))

        one_hot = [1.0 if priority == level else 0.0 for level in PRIORITY_LEVELS]
        features.append(one_hot + [TASK_STATUS_MAP[status], title_len, desc_len])
        targets.append(days)
    return features, targets


def generate_dependency_samples(rng: np.random.Generator, count: int = 600) -> Tuple[List[List[float]], List[float]]:
    features, targets = [], []
    for _ in range(count):
        ratios = rng.dirichlet(np.ones(4))
        total = int(rng.integers(1, 51))
        team = int(rng.integers(1, 11))
        todo, in_progress, review, completed = (float(r) for r in ratios)

        # work piling up before review and many parallel tasks per head read as blocking chains
        score = 0.2 + 0.5 * review + 0.3 * todo + 0.2 * in_progress * min(total / (team * 3), 1.0)
        score = float(np.clip(score + rng.normal(0, 0.03), 0.0, 1.0))

        features.append([
            todo, in_progress, review, completed,
            normalize_value(min(total, 50), 0, 50),
            normalize_value(team, 1, 10),
        ])
        targets.append(score)
    return features, targets


def train_models(seed: int = 42) -> Dict[str, object]:
    rng = np.random.default_rng(seed)

    x, y = generate_category_samples(rng)
    category_model = MLPClassifier(hidden_layer_sizes=(12, 8), max_iter=1000, random_state=seed)
    category_model.fit(x, y)
    logger.info(f"Category model trained, accuracy={category_model.score(x, y):.4f}")

    x, y = generate_duration_samples(rng)
    duration_model = RandomForestRegressor(n_estimators=100, random_state=seed)
    duration_model.fit(x, y)
    logger.info(f"Duration model trained, r2={duration_model.score(x, y):.4f}")

    x, y = generate_dependency_samples(rng)
    dependency_model = RandomForestRegressor(n_estimators=100, random_state=seed)
    dependency_model.fit(x, y)
    logger.info(f"Dependency model trained, r2={dependency_model.score(x, y):.4f}")

    return {
        DURATION_MODEL_FILE: duration_model,
        CATEGORY_MODEL_FILE: category_model,
        DEPENDENCY_MODEL_FILE: dependency_model,
    }


def save_models(models: Dict[str, object], output_dir: str) -> List[Path]:
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, model in models.items():
        path = directory / filename
        joblib.dump(model, path)
        written.append(path)
        logger.info(f"Saved {filename} to {path}")
    return written


def main(argv=None):
    parser = argparse.ArgumentParser(description="Train ProjectPilot prediction models")
    parser.add_argument("--output", default="models/ai", help="Directory for the model artifacts")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    save_models(train_models(seed=args.seed), args.output)


if __name__ == "__main__":
    main()
