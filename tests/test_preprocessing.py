import numpy as np
import pytest

from wine_clustering.data import split_data
from wine_clustering.errors import ConfigurationError, InputValidationError, NumericalError
from wine_clustering.preprocessing import (
    apply_preprocessor,
    dropped_features,
    fit_preprocessor,
    inverse_standardize,
    pca_loadings,
    pca_summary,
    retained_features,
)


@pytest.fixture
def split(wine_df):
    return split_data(wine_df, random_state=42)


def test_standardized_training_columns(split):
    train_df, _ = split
    pre = fit_preprocessor(train_df)
    out = apply_preprocessor(pre, train_df)
    np.testing.assert_allclose(out.mean().to_numpy(), 0.0, atol=1e-10)
    np.testing.assert_allclose(out.std(ddof=0).to_numpy(), 1.0, atol=1e-10)
    assert list(out.columns) == list(train_df.columns)
    assert out.index.equals(train_df.index)


def test_zero_variance_column_is_dropped(split):
    train_df, test_df = split
    train_df = train_df.assign(Constant=5.0)
    pre = fit_preprocessor(train_df)
    assert dropped_features(pre) == ['Constant']
    assert 'Constant' not in retained_features(pre)
    out = apply_preprocessor(pre, test_df.assign(Constant=1.0))
    assert out.shape[1] == 13


def test_all_constant_table_fails(wine_df):
    constant = wine_df.copy()
    constant[:] = 1.0
    with pytest.raises(NumericalError):
        fit_preprocessor(constant)


def test_transform_uses_frozen_training_parameters(split):
    train_df, test_df = split
    pre = fit_preprocessor(train_df)
    expected = (test_df - train_df.mean()) / train_df.std(ddof=0)
    np.testing.assert_allclose(apply_preprocessor(pre, test_df).to_numpy(), expected.to_numpy(), atol=1e-10)


def test_round_trip_recovers_original_values(split):
    train_df, test_df = split
    pre = fit_preprocessor(train_df)
    for table in (train_df, test_df):
        restored = inverse_standardize(pre, apply_preprocessor(pre, table))
        np.testing.assert_allclose(restored.to_numpy(), table.to_numpy(), rtol=1e-10, atol=1e-8)
        assert list(restored.columns) == list(table.columns)


def test_pca_components_orthonormal_and_ordered(split):
    train_df, _ = split
    pre = fit_preprocessor(train_df, n_components=4)
    pca = pre.named_steps['pca']
    np.testing.assert_allclose(pca.components_ @ pca.components_.T, np.eye(4), atol=1e-10)
    assert np.all(np.diff(pca.explained_variance_) <= 0)

    out = apply_preprocessor(pre, train_df)
    assert list(out.columns) == ['PC1', 'PC2', 'PC3', 'PC4']
    # Projected scores are uncorrelated on the training data
    cov = np.cov(out.to_numpy(), rowvar=False)
    np.testing.assert_allclose(cov - np.diag(np.diag(cov)), 0.0, atol=1e-10)


def test_pca_summary_and_loadings(split):
    train_df, _ = split
    pre = fit_preprocessor(train_df, n_components=4)
    summary = pca_summary(pre)
    assert len(summary) == 4
    assert summary['Cumulative Ratio'].is_monotonic_increasing
    assert summary['Cumulative Ratio'].iloc[-1] < 1.0
    loadings = pca_loadings(pre)
    assert loadings.shape == (13, 4)
    np.testing.assert_allclose((loadings ** 2).sum().to_numpy(), 1.0)


def test_fewer_rows_than_columns_fails(wine_df):
    with pytest.raises(NumericalError, match="rows"):
        fit_preprocessor(wine_df.head(5))


def test_singular_covariance_fails_before_pca(split):
    train_df, _ = split
    collinear = train_df.assign(Alcohol_x2=train_df['Alcohol'] * 2.0)
    with pytest.raises(NumericalError, match="singular"):
        fit_preprocessor(collinear, n_components=4)
    # Without PCA the same table is still usable
    fit_preprocessor(collinear)


def test_too_many_components(split):
    train_df, _ = split
    with pytest.raises(ConfigurationError):
        fit_preprocessor(train_df, n_components=14)


def test_inverse_standardize_rejects_pca(split):
    train_df, _ = split
    pre = fit_preprocessor(train_df, n_components=4)
    with pytest.raises(ConfigurationError):
        inverse_standardize(pre, apply_preprocessor(pre, train_df))


def test_apply_requires_fitted_columns(split):
    train_df, test_df = split
    pre = fit_preprocessor(train_df)
    with pytest.raises(InputValidationError, match="Hue"):
        apply_preprocessor(pre, test_df.drop(columns=['Hue']))


def test_column_order_does_not_matter(split):
    train_df, test_df = split
    pre = fit_preprocessor(train_df)
    shuffled = test_df[test_df.columns[::-1]]
    np.testing.assert_allclose(apply_preprocessor(pre, shuffled).to_numpy(), apply_preprocessor(pre, test_df).to_numpy())
