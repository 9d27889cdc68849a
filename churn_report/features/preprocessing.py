"""
Preprocessing pipelines for the Telco Customer Churn dataset.

This module builds the sklearn ColumnTransformer that turns a cleaned
frame into a model-ready matrix. Both classifiers embed it in their
own Pipeline, so it is fitted on the training split only.

Design Principles:
1. Categorical fields are expanded to indicator columns
2. Numeric fields are standardized (the logistic solver needs it)
3. The identifier and the target never reach the model
"""

from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .feature_definitions import (
    CATEGORICAL_COLS,
    NUMERIC_COLS,
    source_column,
)


def create_numeric_pipeline() -> Pipeline:
    """
    Create preprocessing pipeline for numeric features.

    No imputer: cleaning guarantees complete rows.
    """
    return Pipeline([
        ('scaler', StandardScaler())
    ])


def create_categorical_pipeline() -> Pipeline:
    """
    Create preprocessing pipeline for categorical features.

    OneHotEncoder settings:
    - handle_unknown='ignore': categories unseen during fit become all-zeros
    - sparse_output=False: dense output, easier to inspect
    """
    return Pipeline([
        ('encoder', OneHotEncoder(
            handle_unknown='ignore',
            sparse_output=False
        ))
    ])


def create_preprocessor() -> ColumnTransformer:
    """
    Create the full preprocessing ColumnTransformer.

    Returns:
        Unfitted ColumnTransformer ready to be embedded in a Pipeline.
    """
    return ColumnTransformer(
        transformers=[
            ('num', create_numeric_pipeline(), NUMERIC_COLS),
            ('cat', create_categorical_pipeline(), CATEGORICAL_COLS)
        ],
        remainder='drop',  # customerID and Churn
        verbose_feature_names_out=True
    )


def get_feature_names(fitted_preprocessor: ColumnTransformer) -> list:
    """
    Get feature names from a fitted ColumnTransformer.

    Args:
        fitted_preprocessor: A ColumnTransformer that has been fitted.

    Returns:
        List of feature names in the transformed output.
    """
    return list(fitted_preprocessor.get_feature_names_out())


def get_source_columns(fitted_preprocessor: ColumnTransformer) -> list:
    """Input column behind each transformed feature, in output order."""
    return [source_column(name) for name in get_feature_names(fitted_preprocessor)]
