"""
Column definitions for the Telco Customer Churn dataset.

This module is the single place that knows the input schema.
Ingestion validates against REQUIRED_COLUMNS and the modeling
pipelines pick their column groups from here.

Column Categories:
- IDENTIFIER: Dropped before modeling
- TARGET: The variable we're predicting
- NUMERIC: Continuous features, scaled for the logistic model
- CATEGORICAL: Everything else, one-hot encoded
"""

# Identifier column - must be dropped before modeling
IDENTIFIER_COL = 'customerID'

# Target variable
TARGET_COL = 'Churn'
POSITIVE_LABEL = 'Yes'
NEGATIVE_LABEL = 'No'

# Numeric features
NUMERIC_COLS = [
    'tenure',          # Months with company (0-72)
    'MonthlyCharges',  # Current monthly charge
    'TotalCharges',    # Total amount charged to date (blank for new customers)
]

# Categorical features
# SeniorCitizen arrives as 0/1 and is recoded to No/Yes during cleaning
CATEGORICAL_COLS = [
    'gender',            # Male/Female
    'SeniorCitizen',     # No/Yes after cleaning
    'Partner',           # Yes/No
    'Dependents',        # Yes/No
    'PhoneService',      # Yes/No
    'MultipleLines',     # Yes/No/No phone service
    'InternetService',   # DSL/Fiber optic/No
    'OnlineSecurity',    # Yes/No/No internet service
    'OnlineBackup',      # Yes/No/No internet service
    'DeviceProtection',  # Yes/No/No internet service
    'TechSupport',       # Yes/No/No internet service
    'StreamingTV',       # Yes/No/No internet service
    'StreamingMovies',   # Yes/No/No internet service
    'Contract',          # Month-to-month/One year/Two year
    'PaperlessBilling',  # Yes/No
    'PaymentMethod',     # Electronic check/Mailed check/Bank transfer/Credit card
]

# All predictor columns (excludes identifier and target)
FEATURE_COLS = NUMERIC_COLS + CATEGORICAL_COLS

# File order of the raw CSV header
REQUIRED_COLUMNS = [
    'customerID', 'gender', 'SeniorCitizen', 'Partner', 'Dependents',
    'tenure', 'PhoneService', 'MultipleLines', 'InternetService',
    'OnlineSecurity', 'OnlineBackup', 'DeviceProtection', 'TechSupport',
    'StreamingTV', 'StreamingMovies', 'Contract', 'PaperlessBilling',
    'PaymentMethod', 'MonthlyCharges', 'TotalCharges', 'Churn',
]

CONTRACT_TYPES = ['Month-to-month', 'One year', 'Two year']

# Add-on services whose adoption is tracked against tenure
SERVICE_COLS = [
    'PhoneService',
    'MultipleLines',
    'OnlineSecurity',
    'OnlineBackup',
    'DeviceProtection',
    'TechSupport',
    'StreamingTV',
    'StreamingMovies',
]


def get_feature_columns() -> list:
    """Return all predictor column names."""
    return FEATURE_COLS.copy()


def get_column_groups() -> dict:
    """Return a dictionary of column groups for pipeline construction."""
    return {
        'numeric': NUMERIC_COLS.copy(),
        'categorical': CATEGORICAL_COLS.copy()
    }


def source_column(encoded_name: str) -> str:
    """
    Map a transformed feature name back to the input column it came from.

    Handles both 'num__tenure' and one-hot names such as
    'cat__Contract_Two year'.
    """
    name = encoded_name.split('__', 1)[-1]
    if name in FEATURE_COLS:
        return name
    # Longest match first: 'StreamingTV' must not swallow a shorter prefix
    for col in sorted(CATEGORICAL_COLS, key=len, reverse=True):
        if name.startswith(col + '_'):
            return col
    return name
