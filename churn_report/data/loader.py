"""
Data loading and cleaning utilities.

This module reads the raw Telco CSV, validates its header once, and
produces the canonical cleaned table every later stage consumes.

Cleaning rules:
1. Strip whitespace from text fields; empty strings count as missing
2. Coerce the numeric fields; unparsable values become NaN
3. Drop every row with a missing field (no imputation)
4. Recode SeniorCitizen from 0/1 to No/Yes

Every function returns a new DataFrame; inputs are never modified.
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from ..exceptions import ParseError, SchemaError
from ..features.feature_definitions import (
    IDENTIFIER_COL,
    NEGATIVE_LABEL,
    NUMERIC_COLS,
    POSITIVE_LABEL,
    REQUIRED_COLUMNS,
    TARGET_COL,
)

logger = logging.getLogger(__name__)

SENIOR_CITIZEN_COL = 'SeniorCitizen'

# 0/1 from the raw file; Yes/No so that re-cleaning a clean frame is a no-op
SENIOR_CITIZEN_MAP = {
    0: NEGATIVE_LABEL,
    1: POSITIVE_LABEL,
    '0': NEGATIVE_LABEL,
    '1': POSITIVE_LABEL,
    NEGATIVE_LABEL: NEGATIVE_LABEL,
    POSITIVE_LABEL: POSITIVE_LABEL,
}

# Cap on per-value warnings; the total is always logged
MAX_LOGGED_PARSE_ERRORS = 20

# Numeric fields that must hold whole numbers
INTEGER_COLS = ['tenure']


def validate_schema(df: pd.DataFrame) -> None:
    """
    Check that every required column is present.

    Raises:
        SchemaError: Listing the absent columns.
    """
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise SchemaError(
            f"Missing required columns: {sorted(missing)}",
            missing_columns=missing
        )


def validate_unique_ids(df: pd.DataFrame) -> None:
    """
    Check that customerID identifies each row.

    Raises:
        SchemaError: Naming up to five duplicated identifiers.
    """
    duplicated = df[IDENTIFIER_COL][df[IDENTIFIER_COL].duplicated()].unique()
    if len(duplicated):
        raise SchemaError(
            f"Duplicate {IDENTIFIER_COL} values ({len(duplicated)}): {list(duplicated[:5])}"
        )


def load_raw_data(filepath: str) -> pd.DataFrame:
    """
    Load the raw Telco Customer Churn dataset.

    Args:
        filepath: Path to the CSV file.

    Returns:
        Raw DataFrame as loaded from CSV, in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SchemaError: If the file is empty, required columns are absent
            or a customerID repeats.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {filepath}")

    logger.info(f"Loading data from {filepath}")
    try:
        df = pd.read_csv(path)
    except pd.errors.EmptyDataError as e:
        raise SchemaError(f"Data file is empty: {filepath}") from e

    validate_schema(df)

    if len(df) == 0:
        raise SchemaError(f"Data file has a header but no rows: {filepath}")

    validate_unique_ids(df)

    logger.info(f"Loaded {len(df):,} rows and {len(df.columns)} columns")
    return df


def strip_text_fields(df: pd.DataFrame) -> pd.DataFrame:
    """Strip whitespace from text columns and turn empty strings into NaN."""
    df = df.copy()
    for col in df.columns:
        if pd.api.types.is_numeric_dtype(df[col]):
            continue
        stripped = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
        df[col] = stripped.where(stripped != '', np.nan)
    return df


def _unparsable(df: pd.DataFrame, column: str) -> pd.Series:
    coerced = pd.to_numeric(df[column], errors='coerce')
    bad = coerced.isna()
    if column in INTEGER_COLS:
        bad |= coerced.notna() & (coerced % 1 != 0)
    return bad


def find_parse_errors(df: pd.DataFrame, column: str) -> List[ParseError]:
    """
    List the values of a numeric column that cannot be parsed.

    Blank values are reported too: they are what the raw file uses for
    TotalCharges of customers in their first month. Fractional values
    of an INTEGER_COLS field are unparsable as well.
    """
    bad = _unparsable(df, column)

    ids = df[IDENTIFIER_COL] if IDENTIFIER_COL in df.columns else pd.Series(df.index, index=df.index)
    return [
        ParseError(column, ids.loc[idx], df.at[idx, column])
        for idx in df.index[bad]
    ]


def coerce_numeric_columns(df: pd.DataFrame, log_errors: bool = True) -> pd.DataFrame:
    """
    Convert the numeric columns to floats/ints.

    Values that fail to parse are recovered as NaN and logged; the
    affected rows are dropped later by drop_incomplete_rows().
    """
    df = df.copy()
    for col in NUMERIC_COLS:
        errors = find_parse_errors(df, col) if log_errors else []
        for error in errors[:MAX_LOGGED_PARSE_ERRORS]:
            logger.warning(f"{error}; treating as missing")
        if len(errors) > MAX_LOGGED_PARSE_ERRORS:
            logger.warning(
                f"{col}: {len(errors) - MAX_LOGGED_PARSE_ERRORS} more unparsable values"
            )
        df[col] = pd.to_numeric(df[col], errors='coerce').mask(_unparsable(df, col))
    return df


def count_missing(df: pd.DataFrame) -> Dict[str, int]:
    """
    Count missing values per column.

    Returns:
        Mapping of column name to missing count, only for columns
        with at least one missing value.
    """
    counts = df.isna().sum()
    return {col: int(n) for col, n in counts.items() if n > 0}


def drop_incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Remove every row that has a missing field."""
    cleaned = df.dropna().reset_index(drop=True)
    n_dropped = len(df) - len(cleaned)
    if n_dropped:
        logger.info(f"Dropped {n_dropped} rows with missing values ({len(cleaned):,} remain)")
    return cleaned


def recode_senior_citizen(df: pd.DataFrame) -> pd.DataFrame:
    """
    Recode SeniorCitizen from 0/1 to a No/Yes categorical.

    Raises:
        ParseError: If a value is neither 0/1 nor No/Yes.
    """
    df = df.copy()
    recoded = df[SENIOR_CITIZEN_COL].map(SENIOR_CITIZEN_MAP)

    unmapped = recoded.isna() & df[SENIOR_CITIZEN_COL].notna()
    if unmapped.any():
        idx = unmapped[unmapped].index[0]
        row = df.at[idx, IDENTIFIER_COL] if IDENTIFIER_COL in df.columns else idx
        raise ParseError(SENIOR_CITIZEN_COL, row, df.at[idx, SENIOR_CITIZEN_COL])

    df[SENIOR_CITIZEN_COL] = recoded.astype(object)
    return df


def validate_clean_data(df: pd.DataFrame) -> None:
    """
    Verify the invariants of a cleaned table.

    Raises:
        SchemaError: If any field is missing, has the wrong type or a
            customerID repeats.
        ParseError: If the target or SeniorCitizen holds an unexpected label.
    """
    validate_schema(df)

    missing = count_missing(df)
    if missing:
        raise SchemaError(f"Cleaned data still has missing values: {missing}")

    validate_unique_ids(df)

    for col in NUMERIC_COLS:
        if not pd.api.types.is_numeric_dtype(df[col]):
            raise SchemaError(f"Column '{col}' is not numeric after cleaning")

    allowed = {POSITIVE_LABEL, NEGATIVE_LABEL}
    for col in (SENIOR_CITIZEN_COL, TARGET_COL):
        bad = ~df[col].isin(allowed)
        if bad.any():
            idx = bad[bad].index[0]
            raise ParseError(col, df.at[idx, IDENTIFIER_COL], df.at[idx, col])


def clean_data(df: pd.DataFrame) -> pd.DataFrame:
    """
    Produce the canonical cleaned table from the raw one.

    Idempotent: clean_data(clean_data(df)) equals clean_data(df).

    Args:
        df: Raw DataFrame from load_raw_data().

    Returns:
        New DataFrame with complete rows, numeric charges and a
        No/Yes SeniorCitizen column.
    """
    validate_schema(df)

    df = strip_text_fields(df)
    df = coerce_numeric_columns(df)

    missing = count_missing(df)
    if missing:
        logger.info(f"Missing values before cleaning: {missing}")

    df = drop_incomplete_rows(df)
    df = recode_senior_citizen(df)
    df['tenure'] = df['tenure'].astype('int64')
    df['MonthlyCharges'] = df['MonthlyCharges'].astype('float64')
    df['TotalCharges'] = df['TotalCharges'].astype('float64')

    validate_clean_data(df)
    return df


def summarize_missing(raw_df: pd.DataFrame) -> Dict[str, int]:
    """Missing-value counts the cleaning stage will act on, per column."""
    return count_missing(coerce_numeric_columns(strip_text_fields(raw_df), log_errors=False))


def encode_target(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.Series:
    """
    Encode the target variable as binary (0/1).

    Args:
        df: DataFrame with target column.
        target_col: Name of the target column.

    Returns:
        Integer Series, 1 for churned customers.
    """
    return (df[target_col] == POSITIVE_LABEL).astype(int)


def prepare_data(filepath: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load and clean the raw data.

    This is the main entry point for data preparation.

    Args:
        filepath: Path to raw CSV file.

    Returns:
        Tuple of (raw_df, clean_df). The two are distinct objects.
    """
    raw_df = load_raw_data(filepath)
    clean_df = clean_data(raw_df)
    logger.info(f"Cleaned data: {len(clean_df):,} rows ({len(raw_df) - len(clean_df)} dropped)")
    return raw_df, clean_df
