"""
Command-line entry point for the churn report.

Usage:
    churn-report
    churn-report data/raw/telco_customer_churn.csv
    python -m churn_report data/raw/telco_customer_churn.csv

Outputs (saved to $CHURN_REPORT_OUTPUT_DIR, default reports/):
    - report.md: Markdown report with tables and charts
    - metrics.json: Evaluation results and run configuration
    - figures/: PNG charts

Everything apart from the input file is configured through
CHURN_REPORT_* environment variables (see churn_report.config).
"""

import argparse
import logging
import sys

from .config import DEFAULT_DATA_PATH, ReportConfig
from .data.splitting import print_split_summary
from .exceptions import ChurnReportError
from .models.evaluation import print_evaluation_report
from .pipeline import run_pipeline, run_stage
from .report import generate_report

logger = logging.getLogger('churn_report')


def main(argv=None) -> int:
    """
    Run the full report.

    Returns:
        Process exit status: 0 on a complete report, 1 otherwise.
    """
    parser = argparse.ArgumentParser(
        description='Telco customer churn analysis report'
    )
    parser.add_argument(
        'data_path',
        nargs='?',
        default=DEFAULT_DATA_PATH,
        help=f'Path to raw data CSV (default: {DEFAULT_DATA_PATH})'
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = ReportConfig.from_env()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    print("=" * 60)
    print(" Telco Customer Churn Report")
    print("=" * 60)
    print(f"\nData path:   {args.data_path}")
    print(f"Output dir:  {config.output_dir}")
    print(f"Random seed: {config.random_state}")

    try:
        result = run_pipeline(args.data_path, config)
        print()
        print_split_summary(result.split_summary())
        for evaluation in result.evaluations.values():
            print_evaluation_report(evaluation, f"{evaluation.model_name} (test set)")
        artifacts = run_stage('reporting', generate_report, result)
    except FileNotFoundError as e:
        logger.error(f"Data file not found: {e}")
        return 1
    except ChurnReportError as e:
        logger.error(f"Report aborted: {e}")
        return 1

    print(f"\nReport:  {artifacts['report']}")
    print(f"Metrics: {artifacts['metrics']}")

    if not result.is_complete:
        logger.error(
            f"Report is INCOMPLETE, failed models: {', '.join(sorted(result.failures))}"
        )
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
