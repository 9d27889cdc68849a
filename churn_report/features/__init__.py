"""Feature definitions, record schema and preprocessing."""

from .feature_definitions import (
    IDENTIFIER_COL,
    TARGET_COL,
    POSITIVE_LABEL,
    NEGATIVE_LABEL,
    NUMERIC_COLS,
    CATEGORICAL_COLS,
    FEATURE_COLS,
    REQUIRED_COLUMNS,
    SERVICE_COLS,
    get_feature_columns,
    get_column_groups,
    source_column
)

from .preprocessing import (
    create_preprocessor,
    create_numeric_pipeline,
    create_categorical_pipeline,
    get_feature_names,
    get_source_columns
)

from .schema import (
    CustomerRecord,
    records_to_frame,
    frame_to_records
)

__all__ = [
    # Feature definitions
    'IDENTIFIER_COL',
    'TARGET_COL',
    'POSITIVE_LABEL',
    'NEGATIVE_LABEL',
    'NUMERIC_COLS',
    'CATEGORICAL_COLS',
    'FEATURE_COLS',
    'REQUIRED_COLUMNS',
    'SERVICE_COLS',
    'get_feature_columns',
    'get_column_groups',
    'source_column',
    # Preprocessing
    'create_preprocessor',
    'create_numeric_pipeline',
    'create_categorical_pipeline',
    'get_feature_names',
    'get_source_columns',
    # Schema
    'CustomerRecord',
    'records_to_frame',
    'frame_to_records'
]
