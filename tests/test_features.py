"""
Tests for feature definitions, preprocessing and record validation.
"""

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from churn_report.exceptions import SchemaError
from churn_report.features.feature_definitions import (
    CATEGORICAL_COLS,
    FEATURE_COLS,
    IDENTIFIER_COL,
    NUMERIC_COLS,
    TARGET_COL,
    get_column_groups,
    get_feature_columns,
    source_column
)
from churn_report.features.preprocessing import (
    create_preprocessor,
    get_feature_names,
    get_source_columns
)
from churn_report.features.schema import (
    CustomerRecord,
    frame_to_records,
    records_to_frame
)


class TestFeatureDefinitions:
    """Tests for column groups."""

    def test_identifier_and_target_not_features(self):
        """Identifier and target must never be predictors."""
        assert IDENTIFIER_COL not in FEATURE_COLS
        assert TARGET_COL not in FEATURE_COLS

    def test_groups_partition_features(self):
        """Numeric and categorical groups cover all features once."""
        groups = get_column_groups()

        assert set(groups['numeric']) & set(groups['categorical']) == set()
        assert sorted(groups['numeric'] + groups['categorical']) == sorted(FEATURE_COLS)

    def test_returns_copies(self):
        """Callers must not be able to mutate the definitions."""
        cols = get_feature_columns()
        cols.append('extra')

        assert 'extra' not in FEATURE_COLS

    @pytest.mark.parametrize('encoded, expected', [
        ('num__tenure', 'tenure'),
        ('cat__Contract_Two year', 'Contract'),
        ('cat__Contract_Month-to-month', 'Contract'),
        ('cat__SeniorCitizen_Yes', 'SeniorCitizen'),
        ('cat__PaymentMethod_Bank transfer (automatic)', 'PaymentMethod'),
        ('cat__MultipleLines_No phone service', 'MultipleLines'),
        ('StreamingTV_Yes', 'StreamingTV'),
    ])
    def test_source_column(self, encoded, expected):
        """Encoded names should map back to their input field."""
        assert source_column(encoded) == expected


class TestPreprocessor:
    """Tests for the ColumnTransformer."""

    def test_fit_transform_shape(self, clean_df):
        """Output should have one column per numeric field plus one per category."""
        preprocessor = create_preprocessor()
        X = preprocessor.fit_transform(clean_df)

        n_categories = sum(clean_df[c].nunique() for c in CATEGORICAL_COLS)
        assert X.shape == (len(clean_df), len(NUMERIC_COLS) + n_categories)
        assert not np.isnan(X).any()

    def test_drops_identifier_and_target(self, clean_df):
        """customerID and Churn should not reach the model."""
        preprocessor = create_preprocessor()
        preprocessor.fit(clean_df)

        names = get_feature_names(preprocessor)
        assert not any(IDENTIFIER_COL in n for n in names)
        assert not any(n.startswith(f'cat__{TARGET_COL}') for n in names)

    def test_numeric_scaled(self, clean_df):
        """Numeric columns should be standardized."""
        preprocessor = create_preprocessor()
        X = preprocessor.fit_transform(clean_df)

        numeric = X[:, :len(NUMERIC_COLS)]
        np.testing.assert_allclose(numeric.mean(axis=0), 0, atol=1e-8)
        np.testing.assert_allclose(numeric.std(axis=0), 1, atol=1e-8)

    def test_unknown_category_ignored(self, clean_df):
        """Unseen categories encode as all zeros instead of failing."""
        preprocessor = create_preprocessor()
        preprocessor.fit(clean_df)

        row = clean_df.head(1).copy()
        row['PaymentMethod'] = 'Crypto'
        X = preprocessor.transform(row)

        names = get_feature_names(preprocessor)
        payment = [i for i, n in enumerate(names) if n.startswith('cat__PaymentMethod_')]
        assert X[0, payment].sum() == 0

    def test_source_columns(self, clean_df):
        """Every transformed column traces back to a feature."""
        preprocessor = create_preprocessor()
        preprocessor.fit(clean_df)

        sources = get_source_columns(preprocessor)
        assert set(sources) == set(FEATURE_COLS)


class TestRecords:
    """Tests for record validation and conversion."""

    def test_frame_passes_through(self, clean_df):
        """A DataFrame keeps its rows and loses id/target."""
        X = records_to_frame(clean_df)

        assert list(X.columns) == FEATURE_COLS
        assert len(X) == len(clean_df)

    def test_frame_missing_columns(self, clean_df):
        """Missing predictors in a DataFrame raise SchemaError."""
        with pytest.raises(SchemaError) as excinfo:
            records_to_frame(clean_df.drop(columns=['tenure']))

        assert excinfo.value.missing_columns == ['tenure']

    def test_dicts_are_validated(self, clean_df):
        """Plain dicts become a predictor frame."""
        rows = clean_df.head(3).to_dict(orient='records')
        X = records_to_frame(rows)

        assert list(X.columns) == FEATURE_COLS
        assert X['Contract'].tolist() == clean_df['Contract'].head(3).tolist()

    def test_single_record(self, clean_df):
        """A single CustomerRecord is accepted."""
        record = frame_to_records(clean_df.head(1))[0]
        X = records_to_frame(record)

        assert len(X) == 1

    def test_invalid_record(self, clean_df):
        """A bad category value is rejected by the record schema."""
        row = clean_df.head(1).to_dict(orient='records')[0]
        row['Contract'] = 'Three year'

        with pytest.raises(ValidationError):
            records_to_frame([row])

    def test_negative_tenure_rejected(self, clean_df):
        """Tenure cannot be negative."""
        row = clean_df.head(1).to_dict(orient='records')[0]
        row['tenure'] = -1

        with pytest.raises(ValidationError):
            CustomerRecord.model_validate(row)

    def test_frame_to_records(self, clean_df):
        """Each cleaned row becomes a frozen record."""
        records = frame_to_records(clean_df.head(5))

        assert len(records) == 5
        assert records[0].customerID == clean_df[IDENTIFIER_COL].iloc[0]
        with pytest.raises(ValidationError):
            records[0].tenure = 3

    def test_records_round_trip_frame(self, clean_df):
        """Records converted back give the same predictor values."""
        head = clean_df.head(10)
        X = records_to_frame(frame_to_records(head))

        pd.testing.assert_frame_equal(
            X.reset_index(drop=True),
            head[FEATURE_COLS].reset_index(drop=True),
            check_dtype=False
        )
