"""
End-to-end churn analysis.

run_pipeline() composes the stages explicitly: each takes the previous
stage's output and returns a new value, and the whole run is captured
in one PipelineResult.

Stages:
1. ingestion    load_raw_data
2. cleaning     clean_data
3. descriptive  run_descriptive_analysis
4. split        create_split
5. modeling     fit + score each ChurnClassifier
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

import pandas as pd

from .analysis.descriptive import DescriptiveSummary, run_descriptive_analysis
from .config import ReportConfig
from .data.loader import clean_data, load_raw_data, summarize_missing
from .data.splitting import Split, create_split, get_split_summary, validate_no_leakage
from .exceptions import ChurnReportError, ConvergenceError, StageError
from .models.classifiers import ChurnClassifier, ForestModel, LogisticModel, get_model_catalog
from .models.evaluation import EvaluationResult, score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelOutcome:
    """A fitted model with its test evaluation and explanations."""

    model: ChurnClassifier
    evaluation: EvaluationResult
    feature_importance: Optional[pd.DataFrame] = None
    permutation_importance: Optional[pd.DataFrame] = None
    coefficients: Optional[pd.DataFrame] = None


@dataclass(frozen=True)
class PipelineResult:
    """Everything one run produced, in stage order."""

    config: ReportConfig
    raw: pd.DataFrame
    clean: pd.DataFrame
    missing_counts: Dict[str, int]
    descriptive: DescriptiveSummary
    split: Split
    outcomes: Dict[str, ModelOutcome] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def n_dropped(self) -> int:
        return len(self.raw) - len(self.clean)

    @property
    def evaluations(self) -> Dict[str, EvaluationResult]:
        return {key: outcome.evaluation for key, outcome in self.outcomes.items()}

    @property
    def is_complete(self) -> bool:
        return not self.failures

    def split_summary(self) -> dict:
        return get_split_summary(self.split)


def run_stage(stage: str, func: Callable, *args, **kwargs):
    """
    Call one stage, tagging pipeline errors with the stage name.

    Raises:
        StageError: Wrapping any ChurnReportError from the stage.
    """
    logger.info(f"Stage '{stage}' started")
    try:
        result = func(*args, **kwargs)
    except StageError:
        raise
    except ChurnReportError as e:
        logger.error(f"Stage '{stage}' failed: {e}")
        raise StageError(stage, e) from e
    logger.info(f"Stage '{stage}' finished")
    return result


def fit_and_score(
    model: ChurnClassifier,
    split: Split,
    threshold: float
) -> ModelOutcome:
    """Fit one model on the training rows, score it on the test rows."""
    model.fit(split.train)
    evaluation = score(model, split.test, threshold=threshold)

    if isinstance(model, ForestModel):
        return ModelOutcome(
            model=model,
            evaluation=evaluation,
            feature_importance=model.feature_importance('impurity'),
            permutation_importance=model.feature_importance('permutation', data=split.test)
        )
    if isinstance(model, LogisticModel):
        return ModelOutcome(model=model, evaluation=evaluation, coefficients=model.coefficients())
    return ModelOutcome(model=model, evaluation=evaluation)


def run_models(
    split: Split,
    config: ReportConfig
) -> Tuple[Dict[str, ModelOutcome], Dict[str, str]]:
    """
    Fit and score every model of the catalog.

    Models are independent: one that fails to converge is reported in
    the failures mapping and the others still run.

    Returns:
        Tuple of (outcomes by model key, error message by model key).
    """
    catalog = get_model_catalog(
        n_estimators=config.n_estimators,
        random_state=config.random_state,
        logistic_config=config.logistic_params,
        forest_config=config.forest_params
    )

    outcomes: Dict[str, ModelOutcome] = {}
    failures: Dict[str, str] = {}
    for key, model in catalog.items():
        try:
            outcomes[key] = fit_and_score(model, split, config.threshold)
        except ConvergenceError as e:
            logger.error(f"{model.name} skipped: {e}")
            failures[key] = str(e)

    return outcomes, failures


def run_pipeline(data_path: str, config: Optional[ReportConfig] = None) -> PipelineResult:
    """
    Run ingestion, cleaning, descriptive analysis, split and modeling.

    Args:
        data_path: Path to the raw Telco CSV.
        config: Run settings (default: ReportConfig.from_env()).

    Returns:
        PipelineResult holding every intermediate artifact.

    Raises:
        FileNotFoundError: If data_path does not exist.
        StageError: If a stage hits a fatal error.
    """
    if config is None:
        config = ReportConfig.from_env()

    raw = run_stage('ingestion', load_raw_data, data_path)
    missing_counts = run_stage('cleaning', summarize_missing, raw)
    clean = run_stage('cleaning', clean_data, raw)
    logger.info(f"Cleaned data: {len(clean):,} rows ({len(raw) - len(clean)} dropped)")

    descriptive = run_stage(
        'descriptive', run_descriptive_analysis, clean, n_jobs=config.n_jobs
    )

    split = run_stage(
        'split', create_split, clean,
        train_fraction=config.train_fraction,
        random_state=config.random_state
    )
    run_stage('split', validate_no_leakage, split)

    outcomes, failures = run_stage('modeling', run_models, split, config)

    for outcome in outcomes.values():
        evaluation = outcome.evaluation
        logger.info(f"{evaluation.model_name}: test accuracy {evaluation.accuracy:.4f}")
    if failures:
        logger.warning(f"Models that failed: {sorted(failures)}")

    return PipelineResult(
        config=config,
        raw=raw,
        clean=clean,
        missing_counts=missing_counts,
        descriptive=descriptive,
        split=split,
        outcomes=outcomes,
        failures=failures
    )

