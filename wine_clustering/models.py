"""
models.py

Clustering strategies behind one interface, so k-means and Ward hierarchical
clustering are interchangeable in tuning, fitting and prediction.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np
from scipy.cluster.hierarchy import cut_tree, linkage
from sklearn.cluster import KMeans
from sklearn.metrics import pairwise_distances_argmin

from .config import RANDOM_STATE
from .errors import ConfigurationError, NumericalError


def within_cluster_sse(X, labels, centers) -> float:
    """Total within-cluster sum of squared distances to the assigned centers."""
    X = np.asarray(X, dtype=float)
    centers = np.asarray(centers, dtype=float)
    return float(((X - centers[np.asarray(labels)]) ** 2).sum())


class ClusteringStrategy(ABC):
    """Base class for clustering algorithm families."""

    name = "base"

    def __init__(self, n_clusters: int):
        self.n_clusters = n_clusters
        self.labels_ = None
        self.cluster_centers_ = None

    def _validate(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[0] == 0:
            raise ConfigurationError(f"Expected a non-empty 2D feature matrix, got shape {X.shape}.")
        if not isinstance(self.n_clusters, (int, np.integer)) or self.n_clusters < 1:
            raise ConfigurationError(f"n_clusters must be a positive integer, got {self.n_clusters!r}.")
        n_distinct = len(np.unique(X, axis=0))
        if self.n_clusters > n_distinct:
            raise ConfigurationError(
                f"Requested {self.n_clusters} clusters but the data has only {n_distinct} distinct points."
            )
        return X

    def _check_not_degenerate(self) -> None:
        n_found = len(np.unique(self.labels_))
        if n_found < self.n_clusters:
            raise NumericalError(
                f"{self.name} produced {n_found} non-empty clusters instead of {self.n_clusters}."
            )

    def _check_fitted(self) -> None:
        if self.cluster_centers_ is None:
            raise ConfigurationError(f"{type(self).__name__} is not fitted yet; call fit() first.")

    @abstractmethod
    def fit(self, X) -> 'ClusteringStrategy':
        """Fit the model; sets `labels_` and `cluster_centers_`."""

    @abstractmethod
    def predict(self, X) -> np.ndarray:
        """Cluster ids for the rows of X."""

    def fit_predict(self, X) -> np.ndarray:
        return self.fit(X).labels_.copy()

    def centroids(self) -> np.ndarray:
        self._check_fitted()
        return self.cluster_centers_.copy()

    def assign_nearest(self, X) -> np.ndarray:
        """Nearest-centroid (Euclidean) assignment, defined for any rows."""
        self._check_fitted()
        return pairwise_distances_argmin(np.asarray(X, dtype=float), self.cluster_centers_)

    def get_algorithm_info(self) -> Dict[str, Any]:
        return {'algorithm': self.name, 'n_clusters': self.n_clusters}


class KMeansStrategy(ClusteringStrategy):
    """K-means with several random initialisations; the lowest inertia run is kept."""

    name = "kmeans"

    def __init__(self, n_clusters: int, n_init: int = 10, max_iter: int = 300, random_state: int = RANDOM_STATE):
        super().__init__(n_clusters)
        self.n_init = n_init
        self.max_iter = max_iter
        self.random_state = random_state
        self.model = None
        self.inertia_ = None

    def fit(self, X) -> 'KMeansStrategy':
        X = self._validate(X)
        self.model = KMeans(
            n_clusters=self.n_clusters,
            init='random',
            n_init=self.n_init,
            max_iter=self.max_iter,
            random_state=self.random_state,
        )
        self.model.fit(X)
        self.labels_ = self.model.labels_.astype(int)
        self.cluster_centers_ = self.model.cluster_centers_
        self.inertia_ = float(self.model.inertia_)
        self._check_not_degenerate()
        return self

    def predict(self, X) -> np.ndarray:
        return self.assign_nearest(X)

    def get_algorithm_info(self) -> Dict[str, Any]:
        info = super().get_algorithm_info()
        info.update({'n_init': self.n_init, 'max_iter': self.max_iter, 'inertia': self.inertia_})
        return info


class HierarchicalStrategy(ClusteringStrategy):
    """
    Agglomerative clustering (Ward linkage by default).

    The full merge tree is kept in `linkage_` for dendrograms; the tree is cut to
    give exactly `n_clusters` groups. Membership is only defined for the points
    the tree was built from.
    """

    name = "hierarchical"

    def __init__(self, n_clusters: int, method: str = 'ward'):
        super().__init__(n_clusters)
        self.method = method
        self.linkage_ = None
        self._fit_data = None

    def fit(self, X) -> 'HierarchicalStrategy':
        X = self._validate(X)
        if X.shape[0] < 2:
            raise ConfigurationError("Hierarchical clustering needs at least 2 points.")
        self.linkage_ = linkage(X, method=self.method, metric='euclidean')
        self.labels_ = cut_tree(self.linkage_, n_clusters=self.n_clusters).ravel().astype(int)
        self._check_not_degenerate()
        self.cluster_centers_ = np.vstack([X[self.labels_ == c].mean(axis=0) for c in range(self.n_clusters)])
        self._fit_data = X
        return self

    def predict(self, X) -> np.ndarray:
        self._check_fitted()
        X = np.asarray(X, dtype=float)
        if X.shape == self._fit_data.shape and np.array_equal(X, self._fit_data):
            return self.labels_.copy()
        raise ConfigurationError(
            "Hierarchical clustering only reports membership for the points it was fitted on; "
            "use a k-means pipeline to assign new observations."
        )

    def cut_height(self) -> float:
        """Merge distance between the last kept and first undone merge for `n_clusters` groups."""
        self._check_fitted()
        heights = self.linkage_[:, 2]
        if self.n_clusters <= 1:
            return float(heights[-1])
        upper = heights[-(self.n_clusters - 1)]
        lower = heights[-self.n_clusters] if self.n_clusters <= len(heights) else 0.0
        return float((upper + lower) / 2)

    def get_algorithm_info(self) -> Dict[str, Any]:
        info = super().get_algorithm_info()
        info['method'] = self.method
        return info


STRATEGIES = {
    'kmeans': KMeansStrategy,
    'hierarchical': HierarchicalStrategy,
}


def make_strategy(name: str, n_clusters: int, **kwargs) -> ClusteringStrategy:
    """Build a strategy by algorithm name ('kmeans' or 'hierarchical')."""
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ConfigurationError(f"Unknown clustering algorithm '{name}'. Choose from {sorted(STRATEGIES)}.") from None
    return strategy_cls(n_clusters, **kwargs)
