import numpy as np
import pandas as pd
from typing import List
from scipy.stats import shapiro

from .errors import InputValidationError


def _require_numeric(df: pd.DataFrame) -> None:
    non_numeric = [col for col in df.columns if not pd.api.types.is_numeric_dtype(df[col])]
    if non_numeric:
        raise InputValidationError(f"Descriptive statistics need numeric columns; got non-numeric: {non_numeric}")


def missing_value_report(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column count and percentage of missing values."""
    counts = df.isna().sum()
    return pd.DataFrame({
        'Feature': counts.index,
        'Missing': counts.values,
        'Missing %': (counts.values / max(len(df), 1)) * 100,
    })


def check_missing_values(df: pd.DataFrame) -> pd.DataFrame:
    """
    Verifies that no column has missing values.

    Returns the missing-value report when the table is clean; otherwise raises,
    since imputation is not part of this workflow.
    """
    report = missing_value_report(df)
    dirty = report[report['Missing'] > 0]
    if not dirty.empty:
        raise InputValidationError(
            f"Dataset requires a cleaning step; missing values in: {dict(zip(dirty['Feature'], dirty['Missing']))}"
        )
    return report


def summarize_distributions(df: pd.DataFrame) -> pd.DataFrame:
    """describe() per column, transposed, with skewness and kurtosis appended."""
    _require_numeric(df)
    summary = df.describe().T
    summary['skew'] = df.skew()
    summary['kurtosis'] = df.kurtosis()
    return summary


def correlation_matrix(df: pd.DataFrame, method: str = 'pearson') -> pd.DataFrame:
    _require_numeric(df)
    return df.corr(method=method)


def top_correlated_pairs(corr: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """
    Strongest off-diagonal correlations, each unordered pair listed once.

    Args:
        corr (pd.DataFrame): A square correlation matrix.
        n (int): Number of pairs to return.

    Returns:
        pd.DataFrame: Columns ['Feature 1', 'Feature 2', 'Correlation'] sorted by |Correlation|.
    """
    upper = corr.where(np.triu(np.ones(corr.shape), k=1).astype(bool))
    pairs = upper.stack().reset_index()
    pairs.columns = ['Feature 1', 'Feature 2', 'Correlation']
    order = pairs['Correlation'].abs().sort_values(ascending=False).index
    return pairs.loc[order].head(n).reset_index(drop=True)


def perform_normality_tests(df: pd.DataFrame, columns: List[str] = None, sample_size: int = 5000) -> pd.DataFrame:
    """
    Perform Shapiro-Wilk normality tests on specified columns of a DataFrame.

    Args:
        df (pd.DataFrame): The DataFrame containing the data.
        columns (List[str], optional): List of column names to test. If None, all numeric columns are tested.
        sample_size (int): Maximum sample size for the Shapiro-Wilk test (default: 5000).

    Returns:
        pd.DataFrame: A DataFrame with columns ['Feature', 'P-Value', 'Is Normal'] summarizing the test results.
    """
    if columns is None:
        columns = df.select_dtypes(include=np.number).columns.tolist()

    results = []
    for col in columns:
        data = df[col].dropna()
        if len(data) > sample_size:
            data = data.sample(sample_size, random_state=42)
        stat, p_value = shapiro(data)
        results.append({
            'Feature': col,
            'P-Value': p_value,
            'Is Normal': p_value >= 0.05
        })

    return pd.DataFrame(results)
