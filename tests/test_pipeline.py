"""
End-to-end tests for the pipeline, the report writer and the CLI.
"""

import json
from dataclasses import replace

import pytest

from churn_report.cli import main
from churn_report.exceptions import SchemaError, StageError
from churn_report.pipeline import PipelineResult, run_pipeline, run_stage
from churn_report.report import LIMITATION_NOTE, generate_report

from conftest import N_BLANK_TOTAL, N_ROWS, make_telco_frame


@pytest.fixture
def single_churner_csv(tmp_path):
    """Small file in which exactly one customer churned."""
    df = make_telco_frame(n=40, n_blank=0)
    df['Churn'] = 'No'
    df.loc[0, 'Churn'] = 'Yes'
    path = tmp_path / 'single_churner.csv'
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def duplicate_ids_csv(tmp_path, raw_df):
    """File in which every row has the same customerID."""
    path = tmp_path / 'duplicates.csv'
    raw_df.assign(customerID='SAME').to_csv(path, index=False)
    return path


@pytest.fixture
def result(telco_csv, fast_config):
    """A complete run on the synthetic CSV."""
    return run_pipeline(str(telco_csv), fast_config)


class TestRunPipeline:
    """Tests for the composed stages."""

    def test_complete_run(self, result):
        """Both models are fitted and scored."""
        assert isinstance(result, PipelineResult)
        assert result.is_complete
        assert set(result.outcomes) == {'logistic_regression', 'random_forest'}

    def test_cleaning_counts(self, result):
        """Blank TotalCharges rows are dropped and reported."""
        assert len(result.raw) == N_ROWS
        assert result.n_dropped == N_BLANK_TOTAL
        assert result.missing_counts == {'TotalCharges': N_BLANK_TOTAL}

    def test_split_covers_clean_rows(self, result):
        """Train and test together are the cleaned table."""
        assert result.split.n_total == len(result.clean)
        summary = result.split_summary()
        assert summary['random_state'] == result.config.random_state

    def test_evaluated_on_test_rows(self, result):
        """Each confusion matrix counts the test rows once."""
        for evaluation in result.evaluations.values():
            assert evaluation.n_samples == len(result.split.test)
            assert 0.0 <= evaluation.accuracy <= 1.0

    def test_explanations_attached(self, result):
        """Forest carries importances; logistic carries coefficients."""
        forest = result.outcomes['random_forest']
        logistic = result.outcomes['logistic_regression']

        assert forest.feature_importance is not None
        assert forest.permutation_importance is not None
        assert logistic.coefficients is not None
        assert logistic.feature_importance is None

    def test_deterministic(self, telco_csv, fast_config):
        """Two runs with the same config give the same matrices."""
        first = run_pipeline(str(telco_csv), fast_config)
        second = run_pipeline(str(telco_csv), fast_config)

        for key in first.evaluations:
            assert first.evaluations[key].matrix().tolist() == \
                second.evaluations[key].matrix().tolist()

    def test_raw_and_clean_distinct(self, result):
        """Cleaning never overwrites the raw table."""
        assert result.raw is not result.clean
        assert result.raw['TotalCharges'].dtype != result.clean['TotalCharges'].dtype


class TestPipelineErrors:
    """Tests for fatal and non-fatal failures."""

    def test_missing_file(self, tmp_path, fast_config):
        """A missing file is not wrapped."""
        with pytest.raises(FileNotFoundError):
            run_pipeline(str(tmp_path / 'missing.csv'), fast_config)

    def test_schema_error_names_stage(self, tmp_path, raw_df, fast_config):
        """Schema problems abort in the ingestion stage."""
        path = tmp_path / 'bad.csv'
        raw_df.drop(columns=['tenure']).to_csv(path, index=False)

        with pytest.raises(StageError) as excinfo:
            run_pipeline(str(path), fast_config)

        assert excinfo.value.stage == 'ingestion'
        assert isinstance(excinfo.value.cause, SchemaError)

    def test_unstratifiable_names_stage(self, single_churner_csv, fast_config):
        """A class too small to stratify aborts in the split stage."""
        with pytest.raises(StageError) as excinfo:
            run_pipeline(str(single_churner_csv), fast_config)

        assert excinfo.value.stage == 'split'
        assert isinstance(excinfo.value.cause, SchemaError)

    def test_duplicate_ids_name_stage(self, duplicate_ids_csv, fast_config):
        """Repeated customer IDs abort in the ingestion stage."""
        with pytest.raises(StageError) as excinfo:
            run_pipeline(str(duplicate_ids_csv), fast_config)

        assert excinfo.value.stage == 'ingestion'
        assert 'Duplicate customerID' in str(excinfo.value)

    def test_convergence_failure_is_isolated(self, telco_csv, fast_config):
        """A logistic model that fails to converge does not stop the forest."""
        config = replace(fast_config, logistic_params={'solver': 'lbfgs', 'max_iter': 1})
        result = run_pipeline(str(telco_csv), config)

        assert not result.is_complete
        assert 'logistic_regression' in result.failures
        assert set(result.outcomes) == {'random_forest'}

    def test_run_stage_passes_other_errors(self):
        """Errors outside the pipeline hierarchy are not wrapped."""
        def boom():
            raise KeyError('x')

        with pytest.raises(KeyError):
            run_stage('test', boom)


class TestGenerateReport:
    """Tests for the report writer."""

    def test_writes_report_and_metrics(self, result):
        """report.md and metrics.json are written to the output dir."""
        artifacts = generate_report(result)

        assert artifacts['report'].exists()
        assert artifacts['metrics'].exists()
        assert artifacts['report'].parent == result.config.output_dir

    def test_report_content(self, result):
        """The report covers data, split and both models."""
        text = generate_report(result)['report'].read_text()

        assert '# Telco Customer Churn Report' in text
        assert f'Rows dropped for missing values: {N_BLANK_TOTAL}' in text
        assert '### Contract' in text
        assert '## Train/test split' in text
        assert '### Logistic Regression' in text
        assert '### Random Forest' in text
        assert LIMITATION_NOTE in text
        assert 'INCOMPLETE' not in text

    def test_metrics_content(self, result):
        """metrics.json holds the matrices and the config."""
        path = generate_report(result)['metrics']
        data = json.loads(path.read_text())

        assert data['complete'] is True
        assert data['data']['dropped_rows'] == N_BLANK_TOTAL
        assert data['config']['random_state'] == result.config.random_state
        for key, evaluation in result.evaluations.items():
            assert data['models'][key]['true_positives'] == evaluation.true_positives
            assert data['models'][key]['accuracy'] == pytest.approx(evaluation.accuracy)

    def test_no_figures_when_disabled(self, result):
        """make_figures=False writes only the two files."""
        artifacts = generate_report(result)

        assert set(artifacts) == {'report', 'metrics'}
        assert not (result.config.output_dir / 'figures').exists()

    def test_figures(self, telco_csv, fast_config):
        """Charts are written and linked from the report."""
        config = replace(fast_config, make_figures=True)
        artifacts = generate_report(run_pipeline(str(telco_csv), config))

        figures = {k: v for k, v in artifacts.items() if k not in ('report', 'metrics')}
        assert 'correlation' in figures
        assert 'confusion_random_forest' in figures
        assert 'importance_random_forest' in figures
        assert all(path.exists() and path.suffix == '.png' for path in figures.values())
        assert '](figures/correlation_matrix.png)' in artifacts['report'].read_text()

    def test_incomplete_banner(self, telco_csv, fast_config):
        """A failed model is flagged at the top of the report."""
        config = replace(fast_config, logistic_params={'solver': 'lbfgs', 'max_iter': 1})
        result = run_pipeline(str(telco_csv), config)
        artifacts = generate_report(result)

        text = artifacts['report'].read_text()
        assert text.startswith('> **INCOMPLETE RUN**')
        assert '`logistic_regression`' in text

        data = json.loads(artifacts['metrics'].read_text())
        assert data['complete'] is False
        assert 'logistic_regression' in data['failures']

    def test_explicit_output_dir(self, result, tmp_path):
        """output_dir overrides the configured directory."""
        target = tmp_path / 'elsewhere'
        artifacts = generate_report(result, output_dir=str(target))

        assert artifacts['report'] == target / 'report.md'


class TestCli:
    """Tests for the command-line entry point."""

    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, tmp_path):
        monkeypatch.setenv('CHURN_REPORT_OUTPUT_DIR', str(tmp_path / 'cli-reports'))
        monkeypatch.setenv('CHURN_REPORT_N_ESTIMATORS', '10')
        monkeypatch.setenv('CHURN_REPORT_FIGURES', '0')

    def test_success(self, telco_csv, tmp_path, capsys):
        """A complete run exits 0 and prints both evaluations."""
        assert main([str(telco_csv)]) == 0

        out = capsys.readouterr().out
        assert 'DATA SPLIT SUMMARY' in out
        assert 'Logistic Regression' in out
        assert 'Random Forest' in out
        assert (tmp_path / 'cli-reports' / 'report.md').exists()

    def test_missing_file(self, tmp_path):
        """A missing input exits 1."""
        assert main([str(tmp_path / 'missing.csv')]) == 1

    def test_schema_error(self, tmp_path, raw_df):
        """A malformed input exits 1."""
        path = tmp_path / 'bad.csv'
        raw_df.drop(columns=['Churn']).to_csv(path, index=False)

        assert main([str(path)]) == 1

    def test_invalid_environment(self, telco_csv, monkeypatch):
        """A malformed setting exits 1 before any work."""
        monkeypatch.setenv('CHURN_REPORT_SEED', 'abc')

        assert main([str(telco_csv)]) == 1

    def test_bad_fraction(self, telco_csv, monkeypatch):
        """An out-of-range fraction exits 1."""
        monkeypatch.setenv('CHURN_REPORT_TRAIN_FRACTION', '1.0')

        assert main([str(telco_csv)]) == 1

    def test_bad_threshold(self, telco_csv, monkeypatch, capsys):
        """An out-of-range threshold exits 1 before any stage runs."""
        monkeypatch.setenv('CHURN_REPORT_THRESHOLD', '1.5')

        assert main([str(telco_csv)]) == 1
        assert 'DATA SPLIT SUMMARY' not in capsys.readouterr().out

    def test_unstratifiable_data(self, single_churner_csv):
        """A dataset that cannot be split exits 1."""
        assert main([str(single_churner_csv)]) == 1

    def test_duplicate_ids(self, duplicate_ids_csv):
        """Repeated customer IDs exit 1."""
        assert main([str(duplicate_ids_csv)]) == 1
