"""
Model evaluation utilities.

The report scores each model by its confusion matrix on the test split
and the accuracy derived from it. Churn is imbalanced (~26% positive),
so accuracy flatters a model that leans towards "No"; precision,
recall and F1 are derived from the same matrix and reported alongside,
without changing the headline accuracy.

Matrix layout:
                 Predicted
               No      Yes
Actual  No    TN       FP
        Yes   FN       TP
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from ..config import DECISION_THRESHOLD
from ..data.loader import encode_target
from .classifiers import ChurnClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Confusion matrix and accuracy of one model on one dataset."""

    model_name: str
    true_negatives: int
    false_positives: int
    false_negatives: int
    true_positives: int
    threshold: float = DECISION_THRESHOLD
    dataset: str = 'test'

    @property
    def n_samples(self) -> int:
        return (self.true_negatives + self.false_positives
                + self.false_negatives + self.true_positives)

    @property
    def n_positive(self) -> int:
        return self.true_positives + self.false_negatives

    @property
    def n_predicted_positive(self) -> int:
        return self.true_positives + self.false_positives

    @property
    def accuracy(self) -> float:
        if self.n_samples == 0:
            return 0.0
        return (self.true_positives + self.true_negatives) / self.n_samples

    def matrix(self) -> np.ndarray:
        """2x2 array, rows = actual (No, Yes), columns = predicted (No, Yes)."""
        return np.array([
            [self.true_negatives, self.false_positives],
            [self.false_negatives, self.true_positives]
        ])

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['n_samples'] = self.n_samples
        data['accuracy'] = self.accuracy
        return data


def compute_confusion_matrix(
    y_true: np.ndarray,
    y_pred: np.ndarray
) -> Dict[str, int]:
    """
    Compute confusion matrix and return as labeled dictionary.

    Labels are fixed to (0, 1) so a subset without churners still
    yields a 2x2 matrix.
    """
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

    return {
        'true_negatives': int(tn),   # Correctly predicted no churn
        'false_positives': int(fp),  # Predicted churn, actually stayed
        'false_negatives': int(fn),  # Predicted stay, actually churned
        'true_positives': int(tp)    # Correctly predicted churn
    }


def score(
    model: ChurnClassifier,
    test: pd.DataFrame,
    threshold: float = DECISION_THRESHOLD,
    dataset_name: str = 'test'
) -> EvaluationResult:
    """
    Evaluate a fitted model on a labelled frame.

    Args:
        model: Fitted ChurnClassifier.
        test: Cleaned frame including the target column.
        threshold: Decision threshold passed to model.predict().
        dataset_name: Name for logging and the result.

    Returns:
        EvaluationResult with confusion matrix and accuracy.
    """
    logger.info(f"Evaluating {model.name} on {dataset_name} set ({len(test):,} samples)")

    y_true = encode_target(test).to_numpy()
    y_pred = model.predict(test, threshold=threshold)

    result = EvaluationResult(
        model_name=model.name,
        threshold=threshold,
        dataset=dataset_name,
        **compute_confusion_matrix(y_true, y_pred)
    )
    logger.info(f"{model.name} {dataset_name} accuracy: {result.accuracy:.4f}")
    return result


def supplementary_metrics(result: EvaluationResult) -> Dict[str, float]:
    """
    Precision, recall and F1 derived from the confusion matrix.

    Undefined ratios (no predicted or no actual positives) are 0.0.
    """
    tp = result.true_positives
    predicted = result.n_predicted_positive
    actual = result.n_positive

    precision = tp / predicted if predicted else 0.0
    recall = tp / actual if actual else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0

    return {
        'precision': precision,
        'recall': recall,
        'f1': f1,
    }


def compare_results(results: Dict[str, EvaluationResult]) -> pd.DataFrame:
    """
    Create a comparison table of model results.

    Returns:
        DataFrame with models as rows, sorted by accuracy descending.
    """
    rows = []
    for result in results.values():
        row = {'model': result.model_name, 'accuracy': result.accuracy}
        row.update(supplementary_metrics(result))
        row['n_samples'] = result.n_samples
        rows.append(row)

    df = pd.DataFrame(rows, columns=['model', 'accuracy', 'precision', 'recall', 'f1', 'n_samples'])
    df = df.set_index('model')
    return df.sort_values('accuracy', ascending=False)


def print_evaluation_report(
    result: EvaluationResult,
    title: Optional[str] = None
) -> None:
    """Print a formatted evaluation report to console."""
    if title:
        print(f"\n{'='*60}")
        print(f" {title}")
        print(f"{'='*60}")

    print(f"\nModel: {result.model_name}")
    print(f"Dataset: {result.dataset} ({result.n_samples:,} samples)")
    print("-" * 40)
    print(f"  Accuracy:  {result.accuracy:>7.4f}  (threshold = {result.threshold})")

    print("\nConfusion Matrix:")
    print("                  Predicted")
    print("                 No     Yes")
    print(f"  Actual No   {result.true_negatives:>5}   {result.false_positives:>5}")
    print(f"  Actual Yes  {result.false_negatives:>5}   {result.true_positives:>5}")


def save_metrics(
    results: Dict[str, Any],
    filepath: str
) -> None:
    """
    Save evaluation results to a JSON file.

    Args:
        results: Evaluation results dictionary (may hold numpy values).
        filepath: Output path for JSON file.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Convert numpy types to Python types for JSON serialization
    def convert_numpy(obj):
        if isinstance(obj, EvaluationResult):
            return convert_numpy(obj.to_dict())
        elif isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, dict):
            return {str(k): convert_numpy(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [convert_numpy(i) for i in obj]
        return obj

    with open(path, 'w') as f:
        json.dump(convert_numpy(results), f, indent=2)

    logger.info(f"Saved metrics to {filepath}")
