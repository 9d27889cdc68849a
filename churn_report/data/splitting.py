"""
Data splitting utilities.

This module creates the stratified train/test partition the two
models are fitted and scored on.
"""

import logging
from dataclasses import dataclass

import pandas as pd
from sklearn.model_selection import train_test_split

from ..config import RANDOM_STATE, TRAIN_FRACTION
from ..exceptions import InvalidFractionError, SchemaError
from ..features.feature_definitions import IDENTIFIER_COL, POSITIVE_LABEL, TARGET_COL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Split:
    """Train/test partition of a cleaned dataset."""

    train: pd.DataFrame
    test: pd.DataFrame
    train_fraction: float
    random_state: int

    @property
    def n_total(self) -> int:
        return len(self.train) + len(self.test)


def create_split(
    df: pd.DataFrame,
    train_fraction: float = TRAIN_FRACTION,
    random_state: int = RANDOM_STATE,
    target_col: str = TARGET_COL
) -> Split:
    """
    Create a stratified train/test split.

    Stratification ensures both subsets have approximately the same
    proportion of churned customers as the full dataset. The same
    seed on the same data always yields the same membership.

    Args:
        df: Cleaned dataset.
        train_fraction: Proportion for the training set (default 0.7).
        random_state: Random seed for reproducibility.
        target_col: Name of the target column for stratification.

    Returns:
        Split holding copies of the train and test rows.

    Raises:
        InvalidFractionError: If train_fraction is not inside (0, 1).
        SchemaError: If a churn class is absent or too small to appear
            in both subsets.
    """
    if not 0 < train_fraction < 1:
        raise InvalidFractionError(train_fraction)

    n_classes = df[target_col].nunique()
    if n_classes < 2:
        raise SchemaError(f"Cannot stratify on {target_col}: only {n_classes} class present")

    try:
        train_df, test_df = train_test_split(
            df,
            train_size=train_fraction,
            stratify=df[target_col],
            random_state=random_state
        )
    except ValueError as e:
        raise SchemaError(f"Cannot stratify on {target_col}: {e}") from e

    split = Split(
        train=train_df.copy(),
        test=test_df.copy(),
        train_fraction=train_fraction,
        random_state=random_state
    )

    logger.info(f"Data split (seed {random_state}):")
    for name, part in (('Train', split.train), ('Test', split.test)):
        logger.info(
            f"  {name}: {len(part):,} samples ({len(part) / len(df):.1%}), "
            f"churn rate: {_churn_rate(part, target_col):.1%}"
        )

    return split


def _churn_rate(df: pd.DataFrame, target_col: str = TARGET_COL) -> float:
    if len(df) == 0:
        return 0.0
    return float((df[target_col] == POSITIVE_LABEL).mean())


def validate_no_leakage(split: Split) -> None:
    """
    Verify no customer appears in both subsets.

    Raises:
        SchemaError: If any customer is in train and test.
    """
    overlap = set(split.train[IDENTIFIER_COL]) & set(split.test[IDENTIFIER_COL])
    if overlap:
        raise SchemaError(f"Train-test overlap: {len(overlap)} customers")


def get_split_summary(split: Split, target_col: str = TARGET_COL) -> dict:
    """
    Generate a summary of the split.

    Returns:
        Dictionary with size and churn statistics per subset.
    """
    def get_stats(df, name):
        return {
            'name': name,
            'size': len(df),
            'churn_count': int((df[target_col] == POSITIVE_LABEL).sum()),
            'churn_rate': _churn_rate(df, target_col) * 100
        }

    return {
        'total_samples': split.n_total,
        'random_state': split.random_state,
        'splits': [
            get_stats(split.train, 'train'),
            get_stats(split.test, 'test')
        ]
    }


def print_split_summary(summary: dict) -> None:
    """Print a formatted summary of the split."""
    print("=" * 50)
    print("DATA SPLIT SUMMARY")
    print("=" * 50)
    print(f"Total samples: {summary['total_samples']:,}")
    print()
    print(f"{'Split':<12} {'Size':>8} {'Churn':>8} {'Rate':>8}")
    print("-" * 40)

    for split in summary['splits']:
        print(
            f"{split['name']:<12} "
            f"{split['size']:>8,} "
            f"{split['churn_count']:>8,} "
            f"{split['churn_rate']:>7.1f}%"
        )
