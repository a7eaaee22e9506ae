import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import make_blobs
from sklearn.metrics import pairwise_distances_argmin

from wine_clustering.config import FEATURE_COLUMNS
from wine_clustering.data import split_data
from wine_clustering.errors import ConfigurationError
from wine_clustering.predictor import ClusterPipeline, assign_clusters, cluster_profile
from wine_clustering.preprocessing import apply_preprocessor, fit_preprocessor

BLOB_CENTERS = np.array([[-10.0] * 13, [0.0] * 13, [10.0] * 13])


@pytest.fixture(scope="module")
def wine_split(wine_df):
    return split_data(wine_df, random_state=42)


@pytest.fixture(scope="module")
def kmeans_pca_pipeline(wine_split):
    train_df, _ = wine_split
    return ClusterPipeline('kmeans', 3, n_components=4).fit(train_df)


def test_fit_assigns_every_training_row(wine_split, kmeans_pca_pipeline):
    train_df, _ = wine_split
    labels = kmeans_pca_pipeline.labels_
    assert labels.index.equals(train_df.index)
    assert set(labels.unique()) == {0, 1, 2}
    sizes = kmeans_pca_pipeline.cluster_sizes()
    assert list(sizes.index) == [0, 1, 2]
    assert sizes.sum() == len(train_df)


def test_centroids_in_model_space(kmeans_pca_pipeline):
    centroids = kmeans_pca_pipeline.centroids()
    assert centroids.shape == (3, 4)
    assert list(centroids.columns) == ['PC1', 'PC2', 'PC3', 'PC4']
    original = kmeans_pca_pipeline.centroids(space='original')
    assert original.shape == (3, 13)
    assert list(original.columns) == FEATURE_COLUMNS
    with pytest.raises(ConfigurationError):
        kmeans_pca_pipeline.centroids(space='latent')


def test_predict_uses_training_parameters(wine_split, kmeans_pca_pipeline):
    train_df, test_df = wine_split
    predictions = kmeans_pca_pipeline.predict(test_df)
    assert predictions.index.equals(test_df.index)

    train_pre = fit_preprocessor(train_df, n_components=4)
    expected = pairwise_distances_argmin(apply_preprocessor(train_pre, test_df).to_numpy(),
                                         kmeans_pca_pipeline.centroids().to_numpy())
    np.testing.assert_array_equal(predictions.to_numpy(), expected)

    # Statistics of the test split would give a different transform
    leaky = apply_preprocessor(fit_preprocessor(test_df, n_components=4), test_df)
    assert not np.allclose(leaky.to_numpy(), kmeans_pca_pipeline.transform(test_df).to_numpy())


def test_leaky_standardization_changes_assignments(blobs_df):
    pipeline = ClusterPipeline('kmeans', 3).fit(blobs_df)

    # New samples all drawn from the +10 group
    X_new, _ = make_blobs(n_samples=40, centers=BLOB_CENTERS[2:], cluster_std=1.0, random_state=1)
    new_df = pd.DataFrame(X_new, columns=FEATURE_COLUMNS)

    correct = pipeline.predict(new_df).to_numpy()
    assert len(np.unique(correct)) == 1
    centroid_units = pipeline.centroids(space='original').to_numpy()
    assert np.allclose(centroid_units[correct[0]], 10.0, atol=1.0)

    leaky_X = apply_preprocessor(fit_preprocessor(new_df), new_df).to_numpy()
    leaky = pairwise_distances_argmin(leaky_X, pipeline.centroids().to_numpy())
    assert (leaky != correct).mean() > 0.9


def test_hierarchical_pipeline(wine_split):
    train_df, test_df = wine_split
    pipeline = ClusterPipeline('hierarchical', 3).fit(train_df)
    np.testing.assert_array_equal(pipeline.predict(train_df).to_numpy(), pipeline.labels_.to_numpy())
    with pytest.raises(ConfigurationError):
        pipeline.predict(test_df)

    # Without PCA, centroids in original units are the cluster means
    profile = cluster_profile(train_df, pipeline.labels_)
    np.testing.assert_allclose(pipeline.centroids(space='original').to_numpy(),
                               profile[FEATURE_COLUMNS].to_numpy(), rtol=1e-8)
    assert profile['count'].sum() == len(train_df)


def test_unfitted_pipeline():
    with pytest.raises(ConfigurationError, match="not fitted"):
        ClusterPipeline('kmeans', 3).predict(pd.DataFrame({'Alcohol': [13.0]}))


def test_assign_clusters_adds_column(wine_split, kmeans_pca_pipeline):
    _, test_df = wine_split
    out = assign_clusters(test_df, kmeans_pca_pipeline)
    assert 'cluster' in out.columns
    assert 'cluster' not in test_df.columns
    assert len(out) == len(test_df)


def test_save_and_load(tmp_path, wine_split, kmeans_pca_pipeline):
    _, test_df = wine_split
    path = tmp_path / "models" / "pipeline.joblib"
    kmeans_pca_pipeline.save(str(path))
    loaded = ClusterPipeline.load(str(path))
    assert loaded.n_clusters == 3
    pd.testing.assert_series_equal(loaded.predict(test_df), kmeans_pca_pipeline.predict(test_df))


def test_load_missing_artifact(tmp_path):
    with pytest.raises(FileNotFoundError):
        ClusterPipeline.load(str(tmp_path / "missing.joblib"))
