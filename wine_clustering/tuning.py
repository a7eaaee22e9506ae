"""
tuning.py

Cross-validated selection of the number of clusters. Each fold re-fits the
preprocessing on its analysis rows only, fits the clustering strategy, assigns
the held-out rows to the nearest centroid and scores them with the mean
silhouette coefficient.
"""

import numpy as np
import pandas as pd
from kneed import KneeLocator
from sklearn.metrics import silhouette_score
from sklearn.model_selection import KFold
from tqdm import tqdm

from .config import CANDIDATE_COUNTS, N_FOLDS, RANDOM_STATE
from .errors import ConfigurationError
from .models import make_strategy, within_cluster_sse
from .preprocessing import apply_preprocessor, fit_preprocessor


def make_folds(train_df: pd.DataFrame, n_folds: int = N_FOLDS, random_state: int = RANDOM_STATE) -> list:
    """Seeded k-fold partition of the training rows as (analysis, assessment) positional indices."""
    if n_folds < 2 or n_folds > len(train_df):
        raise ConfigurationError(f"n_folds must be between 2 and the number of training rows ({len(train_df)}), got {n_folds}.")
    kf = KFold(n_splits=n_folds, shuffle=True, random_state=random_state)
    return list(kf.split(train_df))


def holdout_silhouette(X_holdout, labels) -> float:
    """Mean silhouette of held-out rows; NaN when undefined for this labelling."""
    n_labels = len(np.unique(labels))
    if n_labels < 2 or n_labels >= len(labels):
        return np.nan
    return float(silhouette_score(X_holdout, labels, metric='euclidean'))


def tune(algorithm: str, train_df: pd.DataFrame, folds: list, candidate_counts=CANDIDATE_COUNTS,
         n_components: int | None = None, random_state: int = RANDOM_STATE, show_progress: bool = True) -> pd.DataFrame:
    """
    Scores every candidate cluster count by cross-validated mean silhouette.

    Args:
        algorithm (str): 'kmeans' or 'hierarchical'.
        train_df (pd.DataFrame): The training split.
        folds (list): Output of `make_folds`.
        candidate_counts (iterable): Cluster counts to try.
        n_components (int, optional): PCA components in the per-fold preprocessing.
        random_state (int): Seed for k-means initialisation.
        show_progress (bool): Display a tqdm progress bar over candidates.

    Returns:
        pd.DataFrame: One row per candidate with columns
            ['n_clusters', 'mean_silhouette', 'std_silhouette', 'mean_sse_within', 'n_valid_folds'].
            A count of 1 has no silhouette and is reported as NaN.
    """
    # Preprocess each fold once; the transforms do not depend on the cluster count
    prepared = []
    for analysis_idx, assessment_idx in folds:
        analysis = train_df.iloc[analysis_idx]
        assessment = train_df.iloc[assessment_idx]
        preprocessor = fit_preprocessor(analysis, n_components=n_components)
        prepared.append((
            apply_preprocessor(preprocessor, analysis).to_numpy(),
            apply_preprocessor(preprocessor, assessment).to_numpy(),
        ))

    kwargs = {'random_state': random_state} if algorithm == 'kmeans' else {}
    label = f"{algorithm}{' + PCA' if n_components else ''}"
    rows = []
    for k in tqdm(list(candidate_counts), desc=f"Tuning {label}", disable=not show_progress):
        fold_scores, fold_sse = [], []
        for X_analysis, X_assessment in prepared:
            strategy = make_strategy(algorithm, k, **kwargs).fit(X_analysis)
            fold_sse.append(within_cluster_sse(X_analysis, strategy.labels_, strategy.cluster_centers_))
            if k < 2:
                continue
            labels = strategy.assign_nearest(X_assessment)
            fold_scores.append(holdout_silhouette(X_assessment, labels))

        scores = np.array(fold_scores, dtype=float)
        valid = scores[~np.isnan(scores)]
        rows.append({
            'n_clusters': k,
            'mean_silhouette': valid.mean() if len(valid) else np.nan,
            'std_silhouette': valid.std(ddof=1) if len(valid) > 1 else np.nan,
            'mean_sse_within': float(np.mean(fold_sse)),
            'n_valid_folds': len(valid),
        })

    return pd.DataFrame(rows)


def select_best_count(results: pd.DataFrame) -> int:
    """Cluster count with the highest mean silhouette; ties go to the smallest count."""
    scored = results.dropna(subset=['mean_silhouette'])
    if scored.empty:
        raise ConfigurationError("No candidate cluster count produced a silhouette score (a count of 1 cannot be scored).")
    best = scored['mean_silhouette'].max()
    winners = scored.loc[scored['mean_silhouette'] == best, 'n_clusters']
    return int(winners.min())


def tune_cluster_count(algorithm: str, train_df: pd.DataFrame, candidate_counts=CANDIDATE_COUNTS,
                       n_folds: int = N_FOLDS, n_components: int | None = None,
                       random_state: int = RANDOM_STATE, show_progress: bool = True):
    """Folds, tuning and selection in one call. Returns (best_count, results)."""
    folds = make_folds(train_df, n_folds=n_folds, random_state=random_state)
    results = tune(algorithm, train_df, folds, candidate_counts=candidate_counts,
                   n_components=n_components, random_state=random_state, show_progress=show_progress)
    return select_best_count(results), results


def find_elbow_point(sse_values, k_range):
    """
    Knee of the within-cluster SSE curve.

    Parameters:
    - sse_values: Mean within-cluster SSE for each k.
    - k_range: The k values corresponding to `sse_values`.

    Returns:
    - optimal_k: The k value at the elbow point, or None when the curve has no knee.
    """
    kneedle = KneeLocator(list(k_range), list(sse_values), curve="convex", direction="decreasing")
    return None if kneedle.knee is None else int(kneedle.knee)


def compare_pipelines(results_by_name: dict) -> pd.DataFrame:
    """Best count and score for each named tuning result (e.g. 'kmeans' vs 'kmeans + PCA')."""
    rows = []
    for name, results in results_by_name.items():
        best_k = select_best_count(results)
        best_score = results.loc[results['n_clusters'] == best_k, 'mean_silhouette'].iloc[0]
        rows.append({'Pipeline': name, 'Best k': best_k, 'Mean Silhouette': best_score})
    return pd.DataFrame(rows).sort_values('Mean Silhouette', ascending=False).reset_index(drop=True)
