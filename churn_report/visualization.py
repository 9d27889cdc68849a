"""
Chart output for the churn report.

Each function draws one figure from an aggregate that the analysis or
evaluation stage already produced, saves it as PNG and returns the
path. Nothing here computes statistics.
"""

import logging
from pathlib import Path
from typing import Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from .models.evaluation import EvaluationResult

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DPI = 150


def _save(fig, filepath: PathLike) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved figure to {path}")
    return path


def plot_churn_rate_by_category(
    rates: pd.DataFrame,
    filepath: PathLike,
    figsize=(8, 5)
) -> Path:
    """Bar chart of churn rate per category value."""
    field = rates.index.name or 'category'
    fig, ax = plt.subplots(figsize=figsize)
    ax.bar([str(v) for v in rates.index], rates['churn_rate'] * 100, color='#c0504d')
    for i, (rate, n) in enumerate(zip(rates['churn_rate'], rates['customers'])):
        ax.text(i, rate * 100, f"{rate:.1%}\n(n={n:,})", ha='center', va='bottom', fontsize=8)
    ax.set_title(f'Churn rate by {field}')
    ax.set_xlabel(field)
    ax.set_ylabel('Churn rate (%)')
    ax.tick_params(axis='x', rotation=30)
    return _save(fig, filepath)


def plot_tenure_trends(
    tenure: pd.DataFrame,
    filepath: PathLike,
    figsize=(12, 5)
) -> Path:
    """Mean monthly charge and service adoption against tenure."""
    fig, (ax_charge, ax_adopt) = plt.subplots(1, 2, figsize=figsize)

    ax_charge.plot(tenure.index, tenure['mean_monthly_charges'], color='#4f81bd')
    ax_charge.set_title('Mean monthly charge by tenure')
    ax_charge.set_xlabel('Tenure (months)')
    ax_charge.set_ylabel('Monthly charge')

    for col in tenure.columns:
        if col.endswith('_adoption'):
            ax_adopt.plot(tenure.index, tenure[col], label=col[:-len('_adoption')], linewidth=1)
    ax_adopt.set_title('Service adoption by tenure')
    ax_adopt.set_xlabel('Tenure (months)')
    ax_adopt.set_ylabel('Share of customers')
    ax_adopt.set_ylim(0, 1)
    ax_adopt.legend(fontsize=7, loc='upper left')

    return _save(fig, filepath)


def plot_correlation_matrix(
    corr: pd.DataFrame,
    filepath: PathLike,
    figsize=(6, 5)
) -> Path:
    """Annotated heatmap of a correlation matrix."""
    fig, ax = plt.subplots(figsize=figsize)
    image = ax.imshow(corr.to_numpy(), cmap='coolwarm', vmin=-1, vmax=1)
    ax.set_xticks(range(len(corr.columns)))
    ax.set_xticklabels(corr.columns, rotation=30)
    ax.set_yticks(range(len(corr.index)))
    ax.set_yticklabels(corr.index)
    for i in range(len(corr.index)):
        for j in range(len(corr.columns)):
            ax.text(j, i, f"{corr.iat[i, j]:.2f}", ha='center', va='center')
    fig.colorbar(image, ax=ax)
    ax.set_title('Correlation matrix (Pearson)')
    return _save(fig, filepath)


def plot_confusion_matrix(
    result: EvaluationResult,
    filepath: PathLike,
    figsize=(5, 4)
) -> Path:
    """Confusion matrix of one evaluated model."""
    matrix = result.matrix()
    fig, ax = plt.subplots(figsize=figsize)
    ax.imshow(matrix, cmap='Blues')
    ax.set_xticks([0, 1])
    ax.set_xticklabels(['No', 'Yes'])
    ax.set_yticks([0, 1])
    ax.set_yticklabels(['No', 'Yes'])
    ax.set_xlabel('Predicted')
    ax.set_ylabel('Actual')
    threshold = matrix.max() / 2
    for i in range(2):
        for j in range(2):
            ax.text(j, i, f"{matrix[i, j]:,}", ha='center', va='center',
                    color='white' if matrix[i, j] > threshold else 'black')
    ax.set_title(f'{result.model_name} (accuracy {result.accuracy:.3f})')
    return _save(fig, filepath)


def plot_feature_importance(
    importance: pd.DataFrame,
    filepath: PathLike,
    top_n: int = 15,
    title: str = 'Feature importance',
    figsize=(8, 6)
) -> Path:
    """Horizontal bar chart of the top_n most important fields."""
    top = importance.head(top_n).iloc[::-1]
    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(top['feature'], top['importance'], color='#9bbb59')
    ax.set_title(title)
    ax.set_xlabel('Importance')
    return _save(fig, filepath)
