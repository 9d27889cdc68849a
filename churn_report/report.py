"""
Report writer.

Turns a PipelineResult into the deliverables of a run:

    <output_dir>/report.md       Markdown report
    <output_dir>/metrics.json    Machine-readable results
    <output_dir>/figures/*.png   Charts (optional)

The report reads only the cleaned dataset summary, the descriptive
aggregates and the evaluation results.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from . import visualization
from .models.evaluation import compare_results, save_metrics, supplementary_metrics
from .pipeline import PipelineResult

logger = logging.getLogger(__name__)

LIMITATION_NOTE = (
    "Accuracy is the headline metric. About a quarter of customers churn, "
    "so a model that always predicts \"No\" already scores roughly 0.73; "
    "precision and recall are listed to show how many churners each model actually finds."
)


def _markdown_table(df: pd.DataFrame, float_format: str = "{:.3f}") -> str:
    """Render a DataFrame (index included) as a Markdown table."""
    df = df.reset_index()
    header = "| " + " | ".join(str(c) for c in df.columns) + " |"
    divider = "|" + "|".join("---" for _ in df.columns) + "|"

    def fmt(value):
        if isinstance(value, float):
            return float_format.format(value)
        return str(value)

    rows = [
        "| " + " | ".join(fmt(v) for v in row) + " |"
        for row in df.itertuples(index=False)
    ]
    return "\n".join([header, divider, *rows])


def build_figures(result: PipelineResult, figures_dir: Path) -> Dict[str, Path]:
    """Draw every chart of the report into figures_dir."""
    figures: Dict[str, Path] = {}
    descriptive = result.descriptive

    for field, rates in descriptive.churn_by_category.items():
        figures[f'churn_by_{field}'] = visualization.plot_churn_rate_by_category(
            rates, figures_dir / f'churn_by_{field}.png'
        )
    if descriptive.tenure is not None:
        figures['tenure_trends'] = visualization.plot_tenure_trends(
            descriptive.tenure, figures_dir / 'tenure_trends.png'
        )
    if descriptive.correlation is not None:
        figures['correlation'] = visualization.plot_correlation_matrix(
            descriptive.correlation, figures_dir / 'correlation_matrix.png'
        )

    for key, outcome in result.outcomes.items():
        figures[f'confusion_{key}'] = visualization.plot_confusion_matrix(
            outcome.evaluation, figures_dir / f'confusion_{key}.png'
        )
        if outcome.feature_importance is not None:
            figures[f'importance_{key}'] = visualization.plot_feature_importance(
                outcome.feature_importance,
                figures_dir / f'importance_{key}.png',
                title=f'{outcome.model.name}: mean decrease in impurity'
            )

    return figures


def render_markdown(
    result: PipelineResult,
    figures: Optional[Dict[str, Path]] = None,
    base_dir: Optional[Path] = None
) -> str:
    """Build the Markdown text of the report."""
    figures = figures or {}

    def image(key: str, alt: str) -> str:
        if key not in figures:
            return ""
        path = figures[key]
        if base_dir is not None:
            path = path.relative_to(base_dir)
        return f"\n![{alt}]({path.as_posix()})\n"

    overview = result.descriptive.overview
    lines = []

    if not result.is_complete:
        lines.append("> **INCOMPLETE RUN**: the following models failed and are "
                     "missing from this report:")
        for key, message in sorted(result.failures.items()):
            lines.append(f"> - `{key}`: {message}")
        lines.append("")

    lines.append(f"""# Telco Customer Churn Report

Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}

## Data

- Raw rows: {len(result.raw):,}
- Rows dropped for missing values: {result.n_dropped:,}
- Clean rows: {len(result.clean):,}
- Churned customers: {overview['n_churned']:,} ({overview['churn_rate']:.1%})
""")

    if result.missing_counts:
        lines.append("### Missing values before cleaning\n")
        lines.append("| Column | Missing |\n|---|---|")
        for col, n in result.missing_counts.items():
            lines.append(f"| {col} | {n} |")
        lines.append("")

    lines.append("## Churn rate by customer attribute\n")
    for field, rates in result.descriptive.churn_by_category.items():
        lines.append(f"### {field}\n")
        lines.append(_markdown_table(rates))
        lines.append(image(f'churn_by_{field}', f'Churn rate by {field}'))

    if result.descriptive.tenure is not None:
        tenure = result.descriptive.tenure
        lines.append("## Customer lifecycle\n")
        lines.append(
            f"Mean monthly charge is {tenure['mean_monthly_charges'].iloc[0]:.2f} "
            f"at tenure {tenure.index[0]} and {tenure['mean_monthly_charges'].iloc[-1]:.2f} "
            f"at tenure {tenure.index[-1]}."
        )
        lines.append(image('tenure_trends', 'Tenure trends'))

    if result.descriptive.correlation is not None:
        lines.append("## Correlation of numeric fields\n")
        lines.append(_markdown_table(result.descriptive.correlation))
        lines.append(image('correlation', 'Correlation matrix'))

    summary = result.split_summary()
    lines.append("## Train/test split\n")
    lines.append(f"Stratified on Churn, seed {summary['random_state']}.\n")
    lines.append("| Split | Size | Churned | Churn rate |\n|---|---|---|---|")
    for part in summary['splits']:
        lines.append(
            f"| {part['name']} | {part['size']:,} | {part['churn_count']:,} | "
            f"{part['churn_rate']:.1f}% |"
        )
    lines.append("")

    if result.outcomes:
        lines.append("## Model results (test set)\n")
        lines.append(_markdown_table(compare_results(result.evaluations)))
        lines.append(f"\n{LIMITATION_NOTE}\n")

        for key, outcome in result.outcomes.items():
            evaluation = outcome.evaluation
            extra = supplementary_metrics(evaluation)
            lines.append(f"### {evaluation.model_name}\n")
            lines.append(f"- Accuracy: {evaluation.accuracy:.4f}")
            if key == 'logistic_regression':
                lines.append(f"- Decision threshold: {evaluation.threshold}")
            lines.append(f"- Precision / recall: {extra['precision']:.3f} / {extra['recall']:.3f}\n")
            lines.append("| | Predicted No | Predicted Yes |\n|---|---|---|")
            lines.append(f"| Actual No | {evaluation.true_negatives} | {evaluation.false_positives} |")
            lines.append(f"| Actual Yes | {evaluation.false_negatives} | {evaluation.true_positives} |")
            lines.append(image(f'confusion_{key}', f'{evaluation.model_name} confusion matrix'))

            if outcome.feature_importance is not None:
                lines.append("#### Feature importance (mean decrease in impurity)\n")
                lines.append(_markdown_table(outcome.feature_importance.set_index('feature')))
                lines.append(image(f'importance_{key}', f'{evaluation.model_name} feature importance'))
            if outcome.permutation_importance is not None:
                lines.append("#### Feature importance (mean decrease in accuracy)\n")
                lines.append(_markdown_table(outcome.permutation_importance.set_index('feature'), "{:.4f}"))
            if outcome.coefficients is not None:
                lines.append("#### Largest coefficients\n")
                top = outcome.coefficients.head(10).set_index('feature')
                lines.append(_markdown_table(top[['coefficient', 'direction']]))
            lines.append("")

    return "\n".join(lines) + "\n"


def metrics_payload(result: PipelineResult) -> dict:
    """JSON-serialisable summary of a run."""
    return {
        'generated': datetime.now().isoformat(),
        'complete': result.is_complete,
        'config': result.config.to_dict(),
        'data': {
            'raw_rows': len(result.raw),
            'clean_rows': len(result.clean),
            'dropped_rows': result.n_dropped,
            'missing_values': result.missing_counts,
            'overview': result.descriptive.overview,
        },
        'split': result.split_summary(),
        'correlation': (
            result.descriptive.correlation.to_dict()
            if result.descriptive.correlation is not None else None
        ),
        'models': {
            key: {
                **outcome.evaluation.to_dict(),
                'supplementary': supplementary_metrics(outcome.evaluation),
                'feature_importance': (
                    outcome.feature_importance.to_dict(orient='records')
                    if outcome.feature_importance is not None else None
                ),
            }
            for key, outcome in result.outcomes.items()
        },
        'failures': result.failures,
    }


def generate_report(result: PipelineResult, output_dir: Optional[str] = None) -> Dict[str, Path]:
    """
    Write report.md, metrics.json and (optionally) figures.

    Args:
        result: Output of run_pipeline().
        output_dir: Target directory (default: result.config.output_dir).

    Returns:
        Mapping of artifact name to written path.
    """
    out = Path(output_dir) if output_dir is not None else Path(result.config.output_dir)
    out.mkdir(parents=True, exist_ok=True)

    figures: Dict[str, Path] = {}
    if result.config.make_figures:
        figures = build_figures(result, out / 'figures')

    report_path = out / 'report.md'
    with open(report_path, 'w') as f:
        f.write(render_markdown(result, figures, base_dir=out))
    logger.info(f"Saved report to {report_path}")

    metrics_path = out / 'metrics.json'
    save_metrics(metrics_payload(result), str(metrics_path))

    artifacts = {'report': report_path, 'metrics': metrics_path}
    artifacts.update(figures)
    return artifacts
