"""
Checks against the published Telco Customer Churn file.

Skipped unless the CSV is present at the default data path. The
expected numbers are those of the reference analysis: 11 blank
TotalCharges rows, a 70/30 split with seed 123, and test accuracies
of roughly 0.80 (logistic) and 0.79 (forest).
"""

from pathlib import Path

import pytest

from churn_report.config import DEFAULT_DATA_PATH, ReportConfig
from churn_report.pipeline import run_pipeline

DATA_PATH = Path(__file__).parent.parent / DEFAULT_DATA_PATH

pytestmark = pytest.mark.skipif(
    not DATA_PATH.exists(),
    reason=f"Reference dataset not found at {DATA_PATH}"
)


@pytest.fixture(scope='module')
def result(tmp_path_factory):
    config = ReportConfig(
        output_dir=tmp_path_factory.mktemp('reports'),
        make_figures=False
    )
    return run_pipeline(str(DATA_PATH), config)


class TestReferenceDataset:
    """Known properties of the full dataset."""

    def test_rows(self, result):
        assert len(result.raw) == 7043
        assert result.n_dropped == 11
        assert len(result.clean) == 7032

    def test_split_sizes(self, result):
        assert len(result.split.train) == pytest.approx(4922, abs=2)
        assert len(result.split.test) == pytest.approx(2110, abs=2)

    def test_tenure_total_charges_correlation(self, result):
        assert result.descriptive.correlation.loc['tenure', 'TotalCharges'] > 0.7

    def test_month_to_month_churns_most(self, result):
        contract = result.descriptive.churn_by_category['Contract']
        assert contract.index[0] == 'Month-to-month'

    def test_logistic_accuracy(self, result):
        accuracy = result.evaluations['logistic_regression'].accuracy
        assert 0.78 <= accuracy <= 0.83

    def test_forest_accuracy(self, result):
        accuracy = result.evaluations['random_forest'].accuracy
        assert 0.77 <= accuracy <= 0.82
