"""
Churn classifiers sharing one interface.

LogisticModel and ForestModel both take a cleaned training frame in
fit() and same-schema records in predict()/predict_proba(). The
pipeline and the evaluation code only talk to ChurnClassifier.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from ..config import DECISION_THRESHOLD, N_ESTIMATORS, RANDOM_STATE
from ..data.loader import encode_target
from ..exceptions import InvalidThresholdError
from ..features.schema import RecordsLike, records_to_frame
from .explainability import (
    get_logistic_regression_coefficients,
    get_permutation_importance,
    get_tree_feature_importance,
)
from .training import (
    build_pipeline,
    create_logistic_regression,
    create_random_forest,
    train_pipeline,
)

logger = logging.getLogger(__name__)


class NotFittedError(RuntimeError):
    """Raised when predicting with a model that has not been fitted."""


class ChurnClassifier(ABC):
    """Common capability of the churn models."""

    name = 'classifier'

    def __init__(self):
        self._pipeline: Optional[Pipeline] = None

    @abstractmethod
    def _build(self) -> Pipeline:
        """Return an unfitted preprocessing + classifier Pipeline."""

    @property
    def is_fitted(self) -> bool:
        return self._pipeline is not None

    @property
    def pipeline(self) -> Pipeline:
        if self._pipeline is None:
            raise NotFittedError(f"{self.name} has not been fitted")
        return self._pipeline

    def fit(self, train: pd.DataFrame) -> 'ChurnClassifier':
        """
        Fit on a cleaned training frame.

        The target column is the dependent variable; every predictor
        column is used, the identifier is ignored.
        """
        X = records_to_frame(train)
        y = encode_target(train)
        self._pipeline = train_pipeline(self._build(), X, y, self.name)
        return self

    def predict_proba(self, records: RecordsLike) -> np.ndarray:
        """Probability of churn for each record."""
        X = records_to_frame(records)
        return self.pipeline.predict_proba(X)[:, 1]

    @abstractmethod
    def predict(self, records: RecordsLike, threshold: float = DECISION_THRESHOLD) -> np.ndarray:
        """Class labels (1 = churn) for each record."""

    def params(self) -> Dict[str, Any]:
        return self.pipeline.named_steps['classifier'].get_params()

    def __repr__(self):
        state = 'fitted' if self.is_fitted else 'unfitted'
        return f"{type(self).__name__}({state})"


class LogisticModel(ChurnClassifier):
    """
    Logistic regression on indicator-encoded categoricals.

    Labels come from thresholding predict_proba(); the threshold is a
    parameter (0.5 by default) and is never tuned.
    """

    name = 'Logistic Regression'

    def __init__(self, config: Optional[Dict[str, Any]] = None, random_state: int = RANDOM_STATE):
        super().__init__()
        self.config = config
        self.random_state = random_state

    def _build(self) -> Pipeline:
        return build_pipeline(create_logistic_regression(self.config, self.random_state))

    def predict(self, records: RecordsLike, threshold: float = DECISION_THRESHOLD) -> np.ndarray:
        if not 0 <= threshold <= 1:
            raise InvalidThresholdError(threshold)
        return (self.predict_proba(records) >= threshold).astype(int)

    def coefficients(self) -> pd.DataFrame:
        """Signed coefficients per encoded feature, largest effect first."""
        return get_logistic_regression_coefficients(self.pipeline)


class ForestModel(ChurnClassifier):
    """
    Random forest whose labels are the majority vote of its trees.

    predict_proba() is kept for completeness; scoring uses predict().
    """

    name = 'Random Forest'

    def __init__(
        self,
        n_estimators: int = N_ESTIMATORS,
        config: Optional[Dict[str, Any]] = None,
        random_state: int = RANDOM_STATE
    ):
        super().__init__()
        if n_estimators < 1:
            raise ValueError(f"n_estimators must be positive, got {n_estimators}")
        self.n_estimators = n_estimators
        self.config = config
        self.random_state = random_state

    def _build(self) -> Pipeline:
        return build_pipeline(
            create_random_forest(self.n_estimators, self.config, self.random_state)
        )

    def vote_share(self, records: RecordsLike) -> np.ndarray:
        """Fraction of trees voting churn for each record."""
        X = records_to_frame(records)
        X_t = self.pipeline.named_steps['preprocessor'].transform(X)
        forest = self.pipeline.named_steps['classifier']

        # Sub-estimators predict indices into forest.classes_
        positive_idx = int(np.flatnonzero(forest.classes_ == 1)[0])
        votes = np.stack([tree.predict(X_t) for tree in forest.estimators_])
        return (votes == positive_idx).mean(axis=0)

    def predict(self, records: RecordsLike, threshold: float = DECISION_THRESHOLD) -> np.ndarray:
        """Majority vote; a tied vote counts as churn. threshold is ignored."""
        return (self.vote_share(records) >= 0.5).astype(int)

    def feature_importance(
        self,
        method: str = 'impurity',
        data: Optional[pd.DataFrame] = None,
        n_repeats: int = 5
    ) -> pd.DataFrame:
        """
        Rank the input fields by their contribution to the forest.

        Args:
            method: 'impurity' (mean decrease in impurity, one-hot
                columns summed onto their source field) or 'permutation'
                (mean decrease in majority-vote accuracy on `data`).
            data: Labelled frame, required for 'permutation'.
            n_repeats: Shuffles per field for 'permutation'.

        Returns:
            DataFrame with 'feature' and 'importance', highest first.
        """
        if method == 'impurity':
            return get_tree_feature_importance(self.pipeline)
        if method == 'permutation':
            if data is None:
                raise ValueError("Permutation importance needs a labelled frame")
            return get_permutation_importance(
                self.pipeline,
                records_to_frame(data),
                encode_target(data),
                n_repeats=n_repeats,
                random_state=self.random_state,
                predict=self.predict
            )
        raise ValueError(f"Unknown importance method: {method}")


def get_model_catalog(
    n_estimators: int = N_ESTIMATORS,
    random_state: int = RANDOM_STATE,
    logistic_config: Optional[Dict[str, Any]] = None,
    forest_config: Optional[Dict[str, Any]] = None
) -> Dict[str, ChurnClassifier]:
    """
    Return unfitted instances of every model in the report.

    Returns:
        Dictionary mapping a short key to a ChurnClassifier.
    """
    return {
        'logistic_regression': LogisticModel(logistic_config, random_state),
        'random_forest': ForestModel(n_estimators, forest_config, random_state),
    }
