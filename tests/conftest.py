"""
Shared fixtures: a synthetic table with the Telco schema.

Churn depends on contract, tenure and internet service so the models
have signal to learn. A few first-month customers carry a blank
TotalCharges, as in the real file.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from churn_report.config import ReportConfig
from churn_report.data.loader import clean_data
from churn_report.features.feature_definitions import CONTRACT_TYPES, REQUIRED_COLUMNS

N_ROWS = 600
N_BLANK_TOTAL = 4


def make_telco_frame(n: int = N_ROWS, n_blank: int = N_BLANK_TOTAL, seed: int = 0) -> pd.DataFrame:
    """Build a raw-looking Telco DataFrame (TotalCharges as text)."""
    rng = np.random.default_rng(seed)

    tenure = rng.integers(1, 73, n)
    contract = rng.choice(CONTRACT_TYPES, n, p=[0.55, 0.21, 0.24])
    internet = rng.choice(['DSL', 'Fiber optic', 'No'], n, p=[0.34, 0.44, 0.22])
    phone = rng.choice(['Yes', 'No'], n, p=[0.9, 0.1])

    def internet_addon():
        values = rng.choice(['Yes', 'No'], n)
        return np.where(internet == 'No', 'No internet service', values)

    multiple_lines = np.where(phone == 'No', 'No phone service', rng.choice(['Yes', 'No'], n))

    monthly = (
        20.0
        + 30.0 * (internet == 'DSL')
        + 60.0 * (internet == 'Fiber optic')
        + rng.normal(0, 5, n)
    ).clip(18.25, 118.75).round(2)

    logit = (
        -1.2
        + 1.6 * (contract == 'Month-to-month')
        - 0.04 * tenure
        + 0.9 * (internet == 'Fiber optic')
    )
    churn = rng.random(n) < 1 / (1 + np.exp(-logit))

    total = [f"{v:.2f}" for v in monthly * tenure]
    for idx in range(n_blank):
        tenure[idx] = 0
        total[idx] = ' '

    df = pd.DataFrame({
        'customerID': [f'{i:04d}-CUST' for i in range(n)],
        'gender': rng.choice(['Male', 'Female'], n),
        'SeniorCitizen': rng.choice([0, 1], n, p=[0.84, 0.16]),
        'Partner': rng.choice(['Yes', 'No'], n),
        'Dependents': rng.choice(['Yes', 'No'], n, p=[0.3, 0.7]),
        'tenure': tenure,
        'PhoneService': phone,
        'MultipleLines': multiple_lines,
        'InternetService': internet,
        'OnlineSecurity': internet_addon(),
        'OnlineBackup': internet_addon(),
        'DeviceProtection': internet_addon(),
        'TechSupport': internet_addon(),
        'StreamingTV': internet_addon(),
        'StreamingMovies': internet_addon(),
        'Contract': contract,
        'PaperlessBilling': rng.choice(['Yes', 'No'], n),
        'PaymentMethod': rng.choice([
            'Electronic check',
            'Mailed check',
            'Bank transfer (automatic)',
            'Credit card (automatic)'
        ], n),
        'MonthlyCharges': monthly,
        'TotalCharges': total,
        'Churn': np.where(churn, 'Yes', 'No'),
    })
    return df[REQUIRED_COLUMNS]


@pytest.fixture
def raw_df():
    """Raw synthetic dataset."""
    return make_telco_frame()


@pytest.fixture
def clean_df(raw_df):
    """Cleaned synthetic dataset."""
    return clean_data(raw_df)


@pytest.fixture
def telco_csv(tmp_path, raw_df):
    """Synthetic dataset written to a CSV file."""
    path = tmp_path / 'telco.csv'
    raw_df.to_csv(path, index=False)
    return path


@pytest.fixture
def fast_config(tmp_path):
    """Small forest, no figures, output under tmp_path."""
    return ReportConfig(
        output_dir=tmp_path / 'reports',
        n_estimators=20,
        make_figures=False
    )
