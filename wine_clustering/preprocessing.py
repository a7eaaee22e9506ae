"""
preprocessing.py

Builds the reusable transformation applied before clustering: zero-variance
column removal, standardization and an optional PCA projection. Parameters are
learned from the training split only and applied unchanged to any other table.
"""

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.feature_selection import VarianceThreshold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from .errors import ConfigurationError, InputValidationError, NumericalError


def build_preprocessor(n_components: int | None = None) -> Pipeline:
    """Unfitted preprocessing pipeline; PCA is appended only when `n_components` is set."""
    steps = [
        ('zero_variance', VarianceThreshold(threshold=0.0)),
        ('scaler', StandardScaler()),
    ]
    if n_components is not None:
        steps.append(('pca', PCA(n_components=n_components, svd_solver='full')))
    return Pipeline(steps)


def has_pca(preprocessor: Pipeline) -> bool:
    return 'pca' in preprocessor.named_steps


def retained_features(preprocessor: Pipeline) -> list:
    """Input columns that survived the zero-variance filter."""
    selector = preprocessor.named_steps['zero_variance']
    return list(selector.get_feature_names_out())


def dropped_features(preprocessor: Pipeline) -> list:
    selector = preprocessor.named_steps['zero_variance']
    kept = set(retained_features(preprocessor))
    return [col for col in selector.feature_names_in_ if col not in kept]


def output_columns(preprocessor: Pipeline) -> list:
    if has_pca(preprocessor):
        n = preprocessor.named_steps['pca'].n_components_
        return [f"PC{i + 1}" for i in range(n)]
    return retained_features(preprocessor)


def fit_preprocessor(train_df: pd.DataFrame, n_components: int | None = None) -> Pipeline:
    """
    Fits the preprocessing pipeline on the training table.

    Args:
        train_df (pd.DataFrame): Numeric training table.
        n_components (int, optional): Number of principal components to keep. None disables PCA.

    Returns:
        Pipeline: The fitted, frozen transform.

    Raises:
        NumericalError: Fewer rows than columns, all columns constant, or a singular
            covariance matrix when PCA is requested.
        ConfigurationError: More components requested than retained features.
    """
    n_rows, n_cols = train_df.shape
    if n_rows < n_cols:
        raise NumericalError(f"Cannot fit preprocessing on {n_rows} rows with {n_cols} columns (need rows >= columns).")
    if n_components is not None and n_components < 1:
        raise ConfigurationError(f"n_components must be a positive integer, got {n_components}.")

    preprocessor = build_preprocessor(n_components)

    # Fit filter + scaler first so the PCA input can be checked before decomposition
    standardize = preprocessor[:2]
    try:
        X_std = standardize.fit_transform(train_df)
    except ValueError as e:
        # VarianceThreshold rejects a table where every column is constant
        raise NumericalError(f"Zero-variance filter removed every column: {e}") from e

    dropped = dropped_features(preprocessor)
    if dropped:
        print(f"Dropping zero-variance columns: {dropped}")

    if n_components is None:
        return preprocessor

    n_retained = X_std.shape[1]
    if n_components > n_retained:
        raise ConfigurationError(f"Requested {n_components} principal components but only {n_retained} features are retained.")

    cov = np.cov(X_std, rowvar=False)
    rank = np.linalg.matrix_rank(cov)
    if rank < cov.shape[0]:
        raise NumericalError(
            f"Covariance matrix of standardized features is singular (rank {rank} < {cov.shape[0]}); PCA components would be degenerate."
        )

    preprocessor.named_steps['pca'].fit(X_std)
    return preprocessor


def apply_preprocessor(preprocessor: Pipeline, df: pd.DataFrame) -> pd.DataFrame:
    """Applies a fitted transform; the result keeps the input index."""
    expected = list(preprocessor.named_steps['zero_variance'].feature_names_in_)
    missing_cols = [col for col in expected if col not in df.columns]
    if missing_cols:
        raise InputValidationError(f"Table is missing columns the transform was fitted on: {missing_cols}")
    transformed = preprocessor.transform(df[expected])
    return pd.DataFrame(transformed, index=df.index, columns=output_columns(preprocessor))


def inverse_standardize(preprocessor: Pipeline, transformed: pd.DataFrame) -> pd.DataFrame:
    """Maps standardized (non-PCA) output back to original units for the retained columns."""
    if has_pca(preprocessor):
        raise ConfigurationError("inverse_standardize expects the output of a preprocessor without PCA.")
    columns = retained_features(preprocessor)
    values = preprocessor.named_steps['scaler'].inverse_transform(np.asarray(transformed, dtype=float))
    index = transformed.index if isinstance(transformed, pd.DataFrame) else None
    return pd.DataFrame(values, index=index, columns=columns)


def to_original_units(preprocessor: Pipeline, points) -> pd.DataFrame:
    """Maps points from model space (standardized or PCA) back to original feature units."""
    values = np.asarray(points, dtype=float)
    if has_pca(preprocessor):
        values = preprocessor.named_steps['pca'].inverse_transform(values)
    columns = retained_features(preprocessor)
    values = preprocessor.named_steps['scaler'].inverse_transform(values)
    return pd.DataFrame(values, columns=columns)


def pca_summary(preprocessor: Pipeline) -> pd.DataFrame:
    """Explained variance per retained principal component."""
    if not has_pca(preprocessor):
        raise ConfigurationError("Preprocessor has no PCA step.")
    pca = preprocessor.named_steps['pca']
    return pd.DataFrame({
        'Component': output_columns(preprocessor),
        'Explained Variance': pca.explained_variance_,
        'Variance Ratio': pca.explained_variance_ratio_,
        'Cumulative Ratio': np.cumsum(pca.explained_variance_ratio_),
    })


def pca_loadings(preprocessor: Pipeline) -> pd.DataFrame:
    """Component weights per retained feature (features as rows)."""
    if not has_pca(preprocessor):
        raise ConfigurationError("Preprocessor has no PCA step.")
    pca = preprocessor.named_steps['pca']
    return pd.DataFrame(pca.components_.T, index=retained_features(preprocessor), columns=output_columns(preprocessor))
