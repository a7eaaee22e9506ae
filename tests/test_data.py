import numpy as np
import pandas as pd
import pytest

from wine_clustering.config import FEATURE_COLUMNS
from wine_clustering.data import load_wine_data, split_data, validate_observation_table
from wine_clustering.errors import InputValidationError


def test_load_wine_data(wine_csv):
    df = load_wine_data(wine_csv)
    assert df.shape == (178, 13)
    assert list(df.columns) == FEATURE_COLUMNS
    assert all(dtype == np.float64 for dtype in df.dtypes)


def test_load_missing_file(tmp_path):
    with pytest.raises(InputValidationError, match="not found"):
        load_wine_data(str(tmp_path / "nope.csv"))


def test_load_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(InputValidationError, match="Could not parse"):
        load_wine_data(str(path))


def test_non_numeric_column_fails_fast(tmp_path, wine_df):
    bad = wine_df.copy()
    bad['Ash'] = bad['Ash'].astype(object)
    bad.loc[3, 'Ash'] = "high"
    path = tmp_path / "bad.csv"
    bad.to_csv(path, index=False)
    with pytest.raises(InputValidationError, match="Non-numeric.*Ash"):
        load_wine_data(str(path))


def test_missing_values_are_rejected(tmp_path, wine_df):
    bad = wine_df.copy()
    bad.loc[[0, 5], 'Hue'] = np.nan
    path = tmp_path / "gaps.csv"
    bad.to_csv(path, index=False)
    with pytest.raises(InputValidationError, match="Hue"):
        load_wine_data(str(path))


def test_missing_columns_are_rejected(wine_df):
    with pytest.raises(InputValidationError, match="Proline"):
        validate_observation_table(wine_df.drop(columns=['Proline']), expected_columns=FEATURE_COLUMNS)


def test_error_message_names_stage(wine_df):
    with pytest.raises(InputValidationError) as excinfo:
        validate_observation_table(pd.DataFrame())
    assert str(excinfo.value).startswith("[input]")


def test_split_is_disjoint_and_covering(wine_df):
    train_df, test_df = split_data(wine_df, test_size=0.25, random_state=42)
    assert len(train_df) == 133
    assert len(test_df) == 45
    assert set(train_df.index).isdisjoint(test_df.index)
    assert set(train_df.index) | set(test_df.index) == set(wine_df.index)


def test_split_is_reproducible(wine_df):
    first, _ = split_data(wine_df, random_state=7)
    second, _ = split_data(wine_df, random_state=7)
    assert list(first.index) == list(second.index)
