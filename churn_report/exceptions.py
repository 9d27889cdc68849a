"""
Error types raised by the churn report pipeline.

All errors derive from ChurnReportError. Data problems also subclass
ValueError so callers that already catch ValueError keep working.
"""

from typing import Iterable, Optional


class ChurnReportError(Exception):
    """Base class for all pipeline errors."""


class SchemaError(ChurnReportError, ValueError):
    """The input table does not match the expected Telco schema."""

    def __init__(self, message: str, missing_columns: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.missing_columns = sorted(missing_columns) if missing_columns else []


class ParseError(ChurnReportError, ValueError):
    """A field holds a value that cannot be interpreted."""

    def __init__(self, field: str, row, value):
        super().__init__(
            f"Cannot parse value {value!r} in field '{field}' (row {row})"
        )
        self.field = field
        self.row = row
        self.value = value


class InvalidFractionError(ChurnReportError, ValueError):
    """Split fraction outside the open interval (0, 1)."""

    def __init__(self, fraction):
        super().__init__(
            f"Train fraction must be strictly between 0 and 1, got {fraction}"
        )
        self.fraction = fraction


class InvalidThresholdError(ChurnReportError, ValueError):
    """Decision threshold outside the closed interval [0, 1]."""

    def __init__(self, threshold):
        super().__init__(f"Threshold must be within [0, 1], got {threshold}")
        self.threshold = threshold


class ConvergenceError(ChurnReportError, RuntimeError):
    """Model fitting stopped before the solver converged."""

    def __init__(self, model_name: str, detail: str = ''):
        message = f"{model_name} did not converge"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.model_name = model_name


class StageError(ChurnReportError):
    """A fatal error annotated with the pipeline stage that raised it."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"Stage '{stage}' failed: {cause}")
        self.stage = stage
        self.cause = cause
