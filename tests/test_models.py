import numpy as np
import pytest
from sklearn.metrics import pairwise_distances_argmin, silhouette_samples

from wine_clustering.errors import ConfigurationError, NumericalError
from wine_clustering.models import (
    HierarchicalStrategy,
    KMeansStrategy,
    make_strategy,
    within_cluster_sse,
)
from wine_clustering.preprocessing import apply_preprocessor, fit_preprocessor


@pytest.fixture(scope="module")
def X_wine(wine_df):
    return apply_preprocessor(fit_preprocessor(wine_df), wine_df).to_numpy()


@pytest.mark.parametrize("k", [2, 3, 5])
def test_kmeans_labels_are_a_fixed_point(X_wine, k):
    model = KMeansStrategy(k, random_state=0).fit(X_wine)
    assert model.labels_.shape == (len(X_wine),)
    assert set(np.unique(model.labels_)) == set(range(k))
    reassigned = pairwise_distances_argmin(X_wine, model.centroids())
    np.testing.assert_array_equal(reassigned, model.labels_)
    np.testing.assert_array_equal(model.predict(X_wine), model.labels_)


def test_kmeans_inertia_matches_sse(X_wine):
    model = KMeansStrategy(3).fit(X_wine)
    assert model.inertia_ == pytest.approx(within_cluster_sse(X_wine, model.labels_, model.cluster_centers_), rel=1e-6)


def test_kmeans_finds_separated_blobs(blobs_df):
    model = KMeansStrategy(3).fit(blobs_df.to_numpy())
    counts = np.bincount(model.labels_)
    assert sorted(counts) == [60, 60, 60]


def test_hierarchical_cut_gives_exact_count(X_wine):
    for k in (1, 2, 3, 7):
        model = HierarchicalStrategy(k).fit(X_wine)
        assert len(np.unique(model.labels_)) == k
        assert model.centroids().shape == (k, X_wine.shape[1])


def test_hierarchical_linkage_and_centroids(X_wine):
    model = HierarchicalStrategy(3).fit(X_wine)
    assert model.linkage_.shape == (len(X_wine) - 1, 4)
    # Ward merge heights never decrease
    assert np.all(np.diff(model.linkage_[:, 2]) >= 0)
    for c in range(3):
        np.testing.assert_allclose(model.centroids()[c], X_wine[model.labels_ == c].mean(axis=0))
    heights = model.linkage_[:, 2]
    assert heights[-3] <= model.cut_height() <= heights[-2]


def test_hierarchical_predict_only_for_fit_points(X_wine):
    model = HierarchicalStrategy(3).fit(X_wine)
    np.testing.assert_array_equal(model.predict(X_wine), model.labels_)
    with pytest.raises(ConfigurationError, match="only reports membership"):
        model.predict(X_wine[:10] + 0.01)
    # Nearest-centroid assignment stays available for scoring held-out rows
    assert model.assign_nearest(X_wine[:10]).shape == (10,)


def test_silhouette_values_are_bounded(X_wine):
    for strategy in (KMeansStrategy(4), HierarchicalStrategy(4)):
        labels = strategy.fit_predict(X_wine)
        values = silhouette_samples(X_wine, labels)
        assert np.all(values >= -1.0) and np.all(values <= 1.0)


def test_more_clusters_than_distinct_points():
    X = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 1.0], [1.0, 1.0]])
    with pytest.raises(ConfigurationError, match="distinct points"):
        KMeansStrategy(3).fit(X)
    with pytest.raises(ConfigurationError, match="distinct points"):
        HierarchicalStrategy(3).fit(X)


@pytest.mark.parametrize("k", [0, -2, 2.5])
def test_invalid_cluster_counts(X_wine, k):
    with pytest.raises(ConfigurationError):
        KMeansStrategy(k).fit(X_wine)


def test_empty_cluster_is_a_numerical_error():
    model = KMeansStrategy(3)
    model.labels_ = np.array([0, 0, 1, 1])
    with pytest.raises(NumericalError, match="2 non-empty clusters"):
        model._check_not_degenerate()


def test_unfitted_strategy():
    with pytest.raises(ConfigurationError, match="not fitted"):
        KMeansStrategy(2).centroids()


def test_make_strategy():
    assert isinstance(make_strategy('kmeans', 3, random_state=1), KMeansStrategy)
    assert isinstance(make_strategy('hierarchical', 3), HierarchicalStrategy)
    with pytest.raises(ConfigurationError, match="Unknown clustering algorithm"):
        make_strategy('dbscan', 3)


def test_algorithm_info():
    info = HierarchicalStrategy(4).get_algorithm_info()
    assert info == {'algorithm': 'hierarchical', 'n_clusters': 4, 'method': 'ward'}
