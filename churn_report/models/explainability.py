"""
Model explainability utilities.

Coefficient tables for the logistic model and field-level importance
rankings for the forest.
"""

from typing import Callable, List, Optional

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance
from sklearn.metrics import accuracy_score
from sklearn.pipeline import Pipeline

from ..features.preprocessing import get_feature_names, get_source_columns


def get_logistic_regression_coefficients(pipeline: Pipeline) -> pd.DataFrame:
    """
    Extract and format logistic regression coefficients.

    Coefficients are log-odds per unit of the (scaled or indicator)
    feature:
    - Positive coefficient: Feature increases churn probability
    - Negative coefficient: Feature decreases churn probability

    Args:
        pipeline: Fitted preprocessor + LogisticRegression pipeline.

    Returns:
        DataFrame with features sorted by absolute coefficient value.
    """
    model = pipeline.named_steps['classifier']
    feature_names = get_feature_names(pipeline.named_steps['preprocessor'])
    coefficients = model.coef_[0]

    df = pd.DataFrame({
        'feature': feature_names,
        'coefficient': coefficients,
        'abs_coefficient': np.abs(coefficients),
        'direction': ['Increases Churn' if c > 0 else 'Decreases Churn'
                      for c in coefficients]
    })

    return df.sort_values('abs_coefficient', ascending=False).reset_index(drop=True)


def aggregate_by_source(
    importances: np.ndarray,
    source_columns: List[str]
) -> pd.DataFrame:
    """Sum per-encoded-column importances onto their input field."""
    df = pd.DataFrame({'feature': source_columns, 'importance': importances})
    df = df.groupby('feature', as_index=False, sort=False)['importance'].sum()
    df = df.sort_values('importance', ascending=False).reset_index(drop=True)
    df['cumulative_importance'] = df['importance'].cumsum()
    return df


def get_tree_feature_importance(pipeline: Pipeline) -> pd.DataFrame:
    """
    Mean-decrease-in-impurity importance per input field.

    Args:
        pipeline: Fitted preprocessor + tree ensemble pipeline.

    Returns:
        DataFrame with fields sorted by importance (sums to 1).
    """
    model = pipeline.named_steps['classifier']
    if not hasattr(model, 'feature_importances_'):
        raise ValueError("Model does not have feature_importances_ attribute")

    sources = get_source_columns(pipeline.named_steps['preprocessor'])
    return aggregate_by_source(model.feature_importances_, sources)


def _accuracy_of(predict):
    def scorer(estimator, X, y):
        return accuracy_score(y, predict(X))
    return scorer


def get_permutation_importance(
    pipeline: Pipeline,
    X: pd.DataFrame,
    y: pd.Series,
    n_repeats: int = 5,
    random_state: int = 0,
    predict: Optional[Callable[[pd.DataFrame], np.ndarray]] = None
) -> pd.DataFrame:
    """
    Mean decrease in accuracy when each input field is shuffled.

    Permutes the raw columns, so one-hot groups move together.
    Accuracy is measured on `predict` (default: pipeline.predict), so a
    model whose labels do not come from pipeline.predict passes its own.

    Returns:
        DataFrame with 'feature', 'importance' and 'importance_std'.
    """
    scoring = 'accuracy' if predict is None else _accuracy_of(predict)
    result = permutation_importance(
        pipeline, X, y,
        scoring=scoring,
        n_repeats=n_repeats,
        random_state=random_state
    )

    df = pd.DataFrame({
        'feature': list(X.columns),
        'importance': result.importances_mean,
        'importance_std': result.importances_std
    })
    return df.sort_values('importance', ascending=False).reset_index(drop=True)
