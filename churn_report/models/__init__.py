"""Model training, prediction and evaluation module."""

from .training import (
    create_logistic_regression,
    create_random_forest,
    build_pipeline,
    train_pipeline
)

from .classifiers import (
    NotFittedError,
    ChurnClassifier,
    LogisticModel,
    ForestModel,
    get_model_catalog
)

from .evaluation import (
    EvaluationResult,
    compute_confusion_matrix,
    score,
    supplementary_metrics,
    compare_results,
    print_evaluation_report,
    save_metrics
)

from .explainability import (
    get_logistic_regression_coefficients,
    get_tree_feature_importance,
    get_permutation_importance,
    aggregate_by_source
)

__all__ = [
    # Training
    'create_logistic_regression',
    'create_random_forest',
    'build_pipeline',
    'train_pipeline',
    # Classifiers
    'NotFittedError',
    'ChurnClassifier',
    'LogisticModel',
    'ForestModel',
    'get_model_catalog',
    # Evaluation
    'EvaluationResult',
    'compute_confusion_matrix',
    'score',
    'supplementary_metrics',
    'compare_results',
    'print_evaluation_report',
    'save_metrics',
    # Explainability
    'get_logistic_regression_coefficients',
    'get_tree_feature_importance',
    'get_permutation_importance',
    'aggregate_by_source'
]
