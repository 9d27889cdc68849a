"""
Descriptive statistics over the cleaned dataset.

Every function here is read-only: it takes the cleaned DataFrame and
returns a new aggregate table. None of them depend on each other, so
run_descriptive_analysis() may fan them out with joblib.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..exceptions import SchemaError
from ..features.feature_definitions import (
    CATEGORICAL_COLS,
    NUMERIC_COLS,
    POSITIVE_LABEL,
    SERVICE_COLS,
    TARGET_COL,
)

logger = logging.getLogger(__name__)

# Fields whose churn breakdown goes into the report by default
DEFAULT_CATEGORY_FIELDS = [
    'gender',
    'SeniorCitizen',
    'Partner',
    'Dependents',
    'InternetService',
    'TechSupport',
    'Contract',
    'PaperlessBilling',
    'PaymentMethod',
]

DEFAULT_SERVICE_FIELDS = SERVICE_COLS


@dataclass(frozen=True)
class DescriptiveSummary:
    """Bundle of the descriptive aggregates for one dataset."""

    overview: Dict[str, float]
    churn_by_category: Dict[str, pd.DataFrame] = field(default_factory=dict)
    tenure: Optional[pd.DataFrame] = None
    correlation: Optional[pd.DataFrame] = None


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(f"Unknown columns: {missing}", missing_columns=missing)


def churn_overview(df: pd.DataFrame) -> Dict[str, float]:
    """Headline counts: customers, churners and the overall churn rate."""
    _require_columns(df, [TARGET_COL])
    n = len(df)
    churned = int((df[TARGET_COL] == POSITIVE_LABEL).sum())
    return {
        'n_customers': n,
        'n_churned': churned,
        'churn_rate': churned / n if n else 0.0,
    }


def churn_rate_by_category(df: pd.DataFrame, field: str) -> pd.DataFrame:
    """
    Within-group churn rate for every value of a categorical field.

    Args:
        df: Cleaned dataset.
        field: Categorical column to group by.

    Returns:
        DataFrame indexed by category value with columns
        'customers', 'churned' and 'churn_rate', sorted by rate.

    Raises:
        SchemaError: If the field is not a column of df.
    """
    _require_columns(df, [field, TARGET_COL])

    churned = (df[TARGET_COL] == POSITIVE_LABEL).astype(int)
    grouped = churned.groupby(df[field], observed=True)

    result = pd.DataFrame({
        'customers': grouped.size(),
        'churned': grouped.sum(),
    })
    result['churn_rate'] = result['churned'] / result['customers']
    result.index.name = field

    return result.sort_values('churn_rate', ascending=False)


def tenure_aggregates(
    df: pd.DataFrame,
    service_fields: Sequence[str] = DEFAULT_SERVICE_FIELDS
) -> pd.DataFrame:
    """
    Per-tenure customer count, mean monthly charge and service adoption.

    Adoption of a service is the fraction of customers at that tenure
    whose value is exactly "Yes" ("No internet service" counts as not
    adopted).

    Returns:
        DataFrame indexed by tenure (ascending) with columns 'customers',
        'mean_monthly_charges' and '<field>_adoption' per service field.
    """
    _require_columns(df, ['tenure', 'MonthlyCharges', *service_fields])

    grouped = df.groupby('tenure')
    result = pd.DataFrame({
        'customers': grouped.size(),
        'mean_monthly_charges': grouped['MonthlyCharges'].mean(),
    })

    for col in service_fields:
        adopted = (df[col] == POSITIVE_LABEL).astype(float)
        result[f'{col}_adoption'] = adopted.groupby(df['tenure']).mean()

    return result.sort_index()


def correlation_matrix(
    df: pd.DataFrame,
    columns: Sequence[str] = NUMERIC_COLS
) -> pd.DataFrame:
    """
    Pearson correlation between the continuous fields.

    Returns:
        Symmetric square DataFrame with unit diagonal.

    Raises:
        SchemaError: If a column is absent or constant (undefined correlation).
    """
    _require_columns(df, columns)
    numeric = df[list(columns)].astype(float)
    constant = [c for c in numeric.columns if numeric[c].nunique() < 2]
    if constant:
        raise SchemaError(f"Cannot correlate constant columns: {constant}")

    corr = numeric.corr(method='pearson')
    values = corr.to_numpy(copy=True)
    # rounding only: constant columns were rejected above
    values = (values + values.T) / 2
    np.fill_diagonal(values, 1.0)
    return pd.DataFrame(values, index=corr.index, columns=corr.columns)


def run_descriptive_analysis(
    df: pd.DataFrame,
    category_fields: Optional[List[str]] = None,
    service_fields: Sequence[str] = DEFAULT_SERVICE_FIELDS,
    n_jobs: int = 1
) -> DescriptiveSummary:
    """
    Compute every descriptive aggregate for the report.

    Args:
        df: Cleaned dataset.
        category_fields: Fields for the churn-rate breakdown
            (default: DEFAULT_CATEGORY_FIELDS).
        service_fields: Fields for the tenure adoption table.
        n_jobs: Worker count for joblib; 1 runs sequentially.

    Returns:
        DescriptiveSummary with all aggregates.
    """
    if category_fields is None:
        category_fields = DEFAULT_CATEGORY_FIELDS

    unknown = [f for f in category_fields if f not in CATEGORICAL_COLS]
    if unknown:
        raise SchemaError(f"Not categorical fields: {unknown}", missing_columns=unknown)

    logger.info(
        f"Running descriptive analysis: {len(category_fields)} category breakdowns, "
        f"tenure trend, correlation matrix (n_jobs={n_jobs})"
    )

    tasks = [delayed(churn_rate_by_category)(df, f) for f in category_fields]
    tasks.append(delayed(tenure_aggregates)(df, service_fields))
    tasks.append(delayed(correlation_matrix)(df))
    tasks.append(delayed(churn_overview)(df))

    results = Parallel(n_jobs=n_jobs)(tasks)

    n_cat = len(category_fields)
    return DescriptiveSummary(
        overview=results[n_cat + 2],
        churn_by_category=dict(zip(category_fields, results[:n_cat])),
        tenure=results[n_cat],
        correlation=results[n_cat + 1],
    )
