"""Telco customer churn analysis: cleaning, descriptive statistics and two classifiers."""

__version__ = "0.1.0"
