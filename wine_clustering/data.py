import os
import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .config import DATA_PATH, FEATURE_COLUMNS, RANDOM_STATE, TEST_SIZE
from .errors import InputValidationError


def validate_observation_table(df: pd.DataFrame, expected_columns: list | None = None) -> pd.DataFrame:
    """
    Checks that a table is usable for clustering: expected columns present,
    every column numeric and no missing values.

    Returns a float copy of the table restricted to `expected_columns` when given.
    """
    if df.empty:
        raise InputValidationError("Observation table is empty.")

    if expected_columns is not None:
        missing_cols = [col for col in expected_columns if col not in df.columns]
        if missing_cols:
            raise InputValidationError(f"Input is missing required columns: {missing_cols}")
        df = df[list(expected_columns)]

    non_numeric = [col for col in df.columns if not pd.api.types.is_numeric_dtype(df[col])]
    if non_numeric:
        # Report the first offending value per column to make the file easy to fix
        details = {}
        for col in non_numeric:
            coerced = pd.to_numeric(df[col], errors='coerce')
            bad = df[col][coerced.isna() & df[col].notna()]
            details[col] = bad.iloc[0] if not bad.empty else None
        raise InputValidationError(f"Non-numeric values found in columns: {details}")

    missing_counts = df.isna().sum()
    missing_counts = missing_counts[missing_counts > 0]
    if not missing_counts.empty:
        raise InputValidationError(
            f"Missing values found (a cleaning step is required first): {missing_counts.to_dict()}"
        )

    return df.astype(np.float64)


def load_wine_data(path: str | None = None, sep: str = ",", expected_columns: list | None = FEATURE_COLUMNS) -> pd.DataFrame:
    """Loads the wine chemistry table from a delimited file and validates it."""
    path = path or DATA_PATH
    print(f"Loading wine data from: {path}")
    if not os.path.isfile(path):
        raise InputValidationError(f"Data file not found at: {path}")

    try:
        df = pd.read_csv(path, sep=sep)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InputValidationError(f"Could not parse {path}: {e}") from e

    df.columns = [str(col).strip() for col in df.columns]
    df = validate_observation_table(df, expected_columns=expected_columns)
    print(f"Wine dataset shape: {df.shape}")
    return df


def split_data(df: pd.DataFrame, test_size: float = TEST_SIZE, random_state: int = RANDOM_STATE):
    """Seeded train/test split; both parts keep the original row index."""
    train_df, test_df = train_test_split(df, test_size=test_size, random_state=random_state)
    print(f"Train split: {train_df.shape}, test split: {test_df.shape}")
    return train_df, test_df
