"""
Run configuration for the churn report.

Defaults reproduce the reference analysis (seed 123, 70/30 split,
100 trees, 0.5 decision threshold). Every value can be overridden
through an environment variable so the command line stays limited
to the input file.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict

from .exceptions import InvalidFractionError, InvalidThresholdError

# =============================================================================
# Defaults
# =============================================================================

# Random seed shared by the split and the random forest
RANDOM_STATE = 123

# Fraction of rows assigned to the training set
TRAIN_FRACTION = 0.70

# Probability cut-off turning logistic scores into class labels
DECISION_THRESHOLD = 0.5

# Number of trees in the forest
N_ESTIMATORS = 100

DEFAULT_DATA_PATH = 'data/raw/telco_customer_churn.csv'
DEFAULT_OUTPUT_DIR = 'reports'

# Logistic Regression hyperparameters: library defaults, one fit, no tuning
LOGISTIC_CONFIG: Dict[str, Any] = {
    'solver': 'lbfgs',
    'max_iter': 1000,
    'C': 1.0,
}

# Random Forest hyperparameters: library defaults apart from tree count
FOREST_CONFIG: Dict[str, Any] = {
    'n_estimators': N_ESTIMATORS,
    'n_jobs': 1,
}

ENV_PREFIX = 'CHURN_REPORT_'


@dataclass(frozen=True)
class ReportConfig:
    """Settings for one pipeline run."""

    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    random_state: int = RANDOM_STATE
    train_fraction: float = TRAIN_FRACTION
    threshold: float = DECISION_THRESHOLD
    n_estimators: int = N_ESTIMATORS
    n_jobs: int = 1
    make_figures: bool = True
    logistic_params: Dict[str, Any] = field(default_factory=lambda: dict(LOGISTIC_CONFIG))
    forest_params: Dict[str, Any] = field(default_factory=lambda: dict(FOREST_CONFIG))

    def __post_init__(self):
        if not 0 < self.train_fraction < 1:
            raise InvalidFractionError(self.train_fraction)
        if not 0 <= self.threshold <= 1:
            raise InvalidThresholdError(self.threshold)
        if self.n_estimators < 1:
            raise ValueError(f"n_estimators must be positive, got {self.n_estimators}")
        if self.n_jobs == 0:
            raise ValueError("n_jobs must not be 0")

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / 'figures'

    @classmethod
    def from_env(cls, environ=None) -> 'ReportConfig':
        """
        Build a config from CHURN_REPORT_* environment variables.

        Unset variables keep their defaults. Values that cannot be
        converted, or that are out of range, raise ValueError.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        converters = {
            'OUTPUT_DIR': ('output_dir', Path),
            'SEED': ('random_state', int),
            'TRAIN_FRACTION': ('train_fraction', float),
            'THRESHOLD': ('threshold', float),
            'N_ESTIMATORS': ('n_estimators', int),
            'N_JOBS': ('n_jobs', int),
            'FIGURES': ('make_figures', _parse_bool),
        }
        for suffix, (attr, convert) in converters.items():
            name = ENV_PREFIX + suffix
            raw = environ.get(name)
            if raw is None or raw == '':
                continue
            try:
                overrides[attr] = convert(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from e

        try:
            return replace(cls(), **overrides)
        except ValueError as e:
            raise ValueError(f"Invalid {ENV_PREFIX}* setting: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output_dir': str(self.output_dir),
            'random_state': self.random_state,
            'train_fraction': self.train_fraction,
            'threshold': self.threshold,
            'n_estimators': self.n_estimators,
            'n_jobs': self.n_jobs,
            'logistic_params': dict(self.logistic_params),
            'forest_params': dict(self.forest_params),
        }


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(value)
