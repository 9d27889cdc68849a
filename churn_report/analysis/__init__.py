"""Descriptive analysis module."""

from .descriptive import (
    DEFAULT_CATEGORY_FIELDS,
    DEFAULT_SERVICE_FIELDS,
    DescriptiveSummary,
    churn_overview,
    churn_rate_by_category,
    tenure_aggregates,
    correlation_matrix,
    run_descriptive_analysis
)

__all__ = [
    'DEFAULT_CATEGORY_FIELDS',
    'DEFAULT_SERVICE_FIELDS',
    'DescriptiveSummary',
    'churn_overview',
    'churn_rate_by_category',
    'tenure_aggregates',
    'correlation_matrix',
    'run_descriptive_analysis'
]
