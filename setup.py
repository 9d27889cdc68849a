"""Setup script for churn_report package."""

from setuptools import setup, find_packages

setup(
    name="telco_churn_report",
    version="0.1.0",
    description="Telco customer churn analysis report with logistic regression and random forest",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "scikit-learn>=1.3.0",
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "joblib>=1.3.0",
        "pydantic>=2.0.0",
        "matplotlib>=3.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "churn-report=churn_report.cli:main",
        ],
    },
)
