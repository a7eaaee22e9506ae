import os
import joblib
import numpy as np
import pandas as pd

from .config import RANDOM_STATE
from .errors import ConfigurationError
from .models import make_strategy
from .preprocessing import apply_preprocessor, fit_preprocessor, output_columns, to_original_units


class ClusterPipeline:
    """Encapsulates the fitted preprocessing transform and clustering model."""

    def __init__(self, algorithm, n_clusters, n_components=None, random_state=RANDOM_STATE):
        if algorithm is None or n_clusters is None:
            raise ConfigurationError("algorithm and n_clusters must be provided.")
        self.algorithm = algorithm
        self.n_clusters = n_clusters
        self.n_components = n_components
        self.random_state = random_state
        self.preprocessor = None
        self.model = None
        self.train_index = None

    def _check_fitted(self):
        if self.model is None:
            raise ConfigurationError("ClusterPipeline is not fitted yet; call fit() first.")

    def fit(self, train_df: pd.DataFrame) -> 'ClusterPipeline':
        """Fits preprocessing and clustering on the training split only."""
        print(f"Fitting {self.algorithm} with k={self.n_clusters} on {len(train_df)} rows"
              f"{f' ({self.n_components} PCA components)' if self.n_components else ''}...")
        self.preprocessor = fit_preprocessor(train_df, n_components=self.n_components)
        X_train = apply_preprocessor(self.preprocessor, train_df)

        kwargs = {'random_state': self.random_state} if self.algorithm == 'kmeans' else {}
        self.model = make_strategy(self.algorithm, self.n_clusters, **kwargs)
        self.model.fit(X_train.to_numpy())
        self.train_index = train_df.index
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Applies the frozen training-split transform."""
        self._check_fitted()
        return apply_preprocessor(self.preprocessor, df)

    def predict(self, df: pd.DataFrame) -> pd.Series:
        """Cluster ids for `df`, computed in the feature space used at fit time."""
        X = self.transform(df)
        labels = self.model.predict(X.to_numpy())
        return pd.Series(labels, index=df.index, name='cluster')

    @property
    def labels_(self) -> pd.Series:
        self._check_fitted()
        return pd.Series(self.model.labels_, index=self.train_index, name='cluster')

    def centroids(self, space: str = 'model') -> pd.DataFrame:
        """
        Cluster centres, one row per cluster.

        space='model' gives coordinates in the standardized or PCA space used for
        clustering; space='original' maps them back to the original feature units.
        """
        self._check_fitted()
        centers = self.model.centroids()
        if space == 'model':
            df = pd.DataFrame(centers, columns=output_columns(self.preprocessor))
        elif space == 'original':
            df = to_original_units(self.preprocessor, centers)
        else:
            raise ConfigurationError(f"Unknown centroid space '{space}'; use 'model' or 'original'.")
        df.index.name = 'cluster'
        return df

    def cluster_sizes(self) -> pd.Series:
        counts = self.labels_.value_counts().reindex(range(self.n_clusters), fill_value=0)
        counts.index.name = 'cluster'
        return counts.rename('count')

    def save(self, path):
        self._check_fitted()
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        joblib.dump(self, path)
        print(f"Cluster pipeline saved to {path}")

    @classmethod
    def load(cls, path) -> 'ClusterPipeline':
        if not os.path.exists(path):
            raise FileNotFoundError(f"Cluster pipeline not found at: {path}")
        pipeline = joblib.load(path)
        if not isinstance(pipeline, cls):
            raise ConfigurationError(f"{path} does not contain a ClusterPipeline.")
        return pipeline


def assign_clusters(df: pd.DataFrame, pipeline: ClusterPipeline) -> pd.DataFrame:
    """Returns a copy of `df` with a 'cluster' column."""
    out = df.copy()
    out['cluster'] = pipeline.predict(df)
    return out


def cluster_profile(df: pd.DataFrame, labels) -> pd.DataFrame:
    """Per-cluster mean of every feature plus the cluster size, in original units."""
    labels = pd.Series(np.asarray(labels), index=df.index, name='cluster')
    profile = df.groupby(labels).mean()
    profile.insert(0, 'count', labels.value_counts().sort_index())
    return profile
