"""
Model construction and fitting utilities.

This module creates the two scikit-learn estimators used by the
report and fits them inside a preprocessing Pipeline.

Model Selection Rationale:
1. Logistic Regression: Interpretable baseline, probability output
2. Random Forest: Bagged trees with feature subsampling, importance ranking
"""

import logging
import warnings
from typing import Any, Dict, Optional

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from ..config import FOREST_CONFIG, LOGISTIC_CONFIG, N_ESTIMATORS, RANDOM_STATE
from ..exceptions import ConvergenceError
from ..features.preprocessing import create_preprocessor

logger = logging.getLogger(__name__)


def create_logistic_regression(
    config: Optional[Dict[str, Any]] = None,
    random_state: int = RANDOM_STATE
) -> LogisticRegression:
    """
    Create a logistic regression model.

    A single maximum-likelihood fit with the library's default L2
    strength; no feature selection and no tuning.

    Args:
        config: Keyword arguments for LogisticRegression
            (default: LOGISTIC_CONFIG).
        random_state: Random seed (only affects tie-breaking).

    Returns:
        Unfitted LogisticRegression model.
    """
    params = dict(LOGISTIC_CONFIG if config is None else config)
    params.setdefault('random_state', random_state)
    return LogisticRegression(**params)


def create_random_forest(
    n_estimators: int = N_ESTIMATORS,
    config: Optional[Dict[str, Any]] = None,
    random_state: int = RANDOM_STATE
) -> RandomForestClassifier:
    """
    Create a random forest classifier.

    Each tree is grown on a bootstrap sample with a random subset of
    predictors ('sqrt') considered at every split.

    Args:
        n_estimators: Number of trees.
        config: Extra keyword arguments (default: FOREST_CONFIG).
        random_state: Random seed for reproducibility.

    Returns:
        Unfitted RandomForestClassifier.
    """
    params = dict(FOREST_CONFIG if config is None else config)
    params['n_estimators'] = n_estimators
    params.setdefault('random_state', random_state)
    params.setdefault('bootstrap', True)
    params.setdefault('max_features', 'sqrt')
    return RandomForestClassifier(**params)


def build_pipeline(model, preprocessor: Optional[ColumnTransformer] = None) -> Pipeline:
    """
    Combine preprocessing and a classifier into one Pipeline.

    Args:
        model: Unfitted classifier.
        preprocessor: Unfitted ColumnTransformer (default: a fresh one).

    Returns:
        Unfitted Pipeline.
    """
    if preprocessor is None:
        preprocessor = create_preprocessor()
    return Pipeline([
        ('preprocessor', preprocessor),
        ('classifier', model)
    ])


def train_pipeline(
    pipeline: Pipeline,
    X_train: pd.DataFrame,
    y_train: pd.Series,
    model_name: str = 'model'
) -> Pipeline:
    """
    Fit the pipeline on training data.

    Raises:
        ConvergenceError: If the solver reports a ConvergenceWarning.
    """
    logger.info(f"Training {model_name} on {len(X_train):,} samples...")

    with warnings.catch_warnings():
        warnings.simplefilter('error', category=ConvergenceWarning)
        try:
            pipeline.fit(X_train, y_train)
        except ConvergenceWarning as e:
            raise ConvergenceError(model_name, str(e)) from e

    logger.info(f"{model_name} training complete")
    return pipeline
