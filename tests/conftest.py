import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_wine, make_blobs

from wine_clustering.config import FEATURE_COLUMNS

BLOB_CENTERS = np.array([[-10.0] * 13, [0.0] * 13, [10.0] * 13])


@pytest.fixture(scope="session")
def wine_df():
    """The 178 x 13 UCI wine measurements under the project's column names."""
    data = load_wine(as_frame=True).data
    df = data.copy()
    df.columns = FEATURE_COLUMNS
    return df.astype(np.float64)


@pytest.fixture
def wine_csv(tmp_path, wine_df):
    path = tmp_path / "wine-clustering.csv"
    wine_df.to_csv(path, index=False)
    return str(path)


@pytest.fixture(scope="session")
def blobs_df():
    """Three well separated, equally sized groups in 13 dimensions."""
    X, _ = make_blobs(n_samples=[60, 60, 60], centers=BLOB_CENTERS, cluster_std=1.0, random_state=0)
    return pd.DataFrame(X, columns=FEATURE_COLUMNS)
