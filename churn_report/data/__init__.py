"""Data loading, cleaning and splitting module."""

from .loader import (
    load_raw_data,
    validate_schema,
    strip_text_fields,
    coerce_numeric_columns,
    count_missing,
    drop_incomplete_rows,
    recode_senior_citizen,
    validate_clean_data,
    clean_data,
    summarize_missing,
    encode_target,
    prepare_data
)

from .splitting import (
    Split,
    create_split,
    validate_no_leakage,
    get_split_summary,
    print_split_summary
)

__all__ = [
    'load_raw_data',
    'validate_schema',
    'strip_text_fields',
    'coerce_numeric_columns',
    'count_missing',
    'drop_incomplete_rows',
    'recode_senior_citizen',
    'validate_clean_data',
    'clean_data',
    'summarize_missing',
    'encode_target',
    'prepare_data',
    'Split',
    'create_split',
    'validate_no_leakage',
    'get_split_summary',
    'print_split_summary'
]
