"""
Record-level schema for a single Telco customer.

The bulk table is validated column-wise at ingestion; this model is
used for records that arrive one at a time, e.g. when scoring new
customers with a fitted model.
"""

from typing import Iterable, List, Literal, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import SchemaError
from .feature_definitions import FEATURE_COLS, IDENTIFIER_COL, TARGET_COL

YesNo = Literal['Yes', 'No']


class CustomerRecord(BaseModel):
    """One cleaned customer row."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    customerID: Optional[str] = None

    # Numeric features
    tenure: int = Field(..., ge=0, description="Months with company")
    MonthlyCharges: float = Field(..., ge=0, description="Monthly charge amount")
    TotalCharges: float = Field(..., ge=0, description="Total charges to date")

    # Categorical features
    gender: Literal['Male', 'Female']
    SeniorCitizen: YesNo
    Partner: YesNo
    Dependents: YesNo
    PhoneService: YesNo
    MultipleLines: Literal['Yes', 'No', 'No phone service']
    InternetService: Literal['DSL', 'Fiber optic', 'No']
    OnlineSecurity: Literal['Yes', 'No', 'No internet service']
    OnlineBackup: Literal['Yes', 'No', 'No internet service']
    DeviceProtection: Literal['Yes', 'No', 'No internet service']
    TechSupport: Literal['Yes', 'No', 'No internet service']
    StreamingTV: Literal['Yes', 'No', 'No internet service']
    StreamingMovies: Literal['Yes', 'No', 'No internet service']
    Contract: Literal['Month-to-month', 'One year', 'Two year']
    PaperlessBilling: YesNo
    PaymentMethod: str = Field(..., min_length=1)

    Churn: Optional[YesNo] = None


RecordsLike = Union[pd.DataFrame, CustomerRecord, Iterable[CustomerRecord], Iterable[dict]]


def records_to_frame(records: RecordsLike) -> pd.DataFrame:
    """
    Turn records into a DataFrame with the predictor columns.

    DataFrames pass through (column-subset only); dicts are validated
    through CustomerRecord first.
    """
    if isinstance(records, pd.DataFrame):
        missing = [c for c in FEATURE_COLS if c not in records.columns]
        if missing:
            raise SchemaError(f"Missing predictor columns: {missing}", missing)
        return records[FEATURE_COLS]

    if isinstance(records, CustomerRecord):
        records = [records]

    rows: List[dict] = []
    for record in records:
        if not isinstance(record, CustomerRecord):
            record = CustomerRecord.model_validate(record)
        rows.append(record.model_dump(exclude={IDENTIFIER_COL, TARGET_COL}))

    return pd.DataFrame(rows, columns=FEATURE_COLS)


def frame_to_records(df: pd.DataFrame) -> List[CustomerRecord]:
    """Read-only record view of a cleaned DataFrame."""
    return [
        CustomerRecord.model_validate(row)
        for row in df.to_dict(orient='records')
    ]
