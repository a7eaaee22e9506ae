# main.py
# python main.py [path/to/wine-clustering.csv]

import os
import sys

from wine_clustering.config import (
    ALGORITHMS, CANDIDATE_COUNTS, DATA_PATH, N_FOLDS, N_PCA_COMPONENTS, PLOTS_DIR, RANDOM_STATE
)
from wine_clustering.data import load_wine_data, split_data
from wine_clustering.eda import check_missing_values, correlation_matrix, summarize_distributions, top_correlated_pairs
from wine_clustering.errors import WineClusteringError
from wine_clustering.predictor import ClusterPipeline
from wine_clustering.tuning import compare_pipelines, make_folds, select_best_count, tune
from wine_clustering.utils import log_and_print, save_table, setup_environment


def run_pipeline(data_path):
    print("Loading data...")
    df = load_wine_data(data_path)

    print("Describing data...")
    check_missing_values(df)
    save_table(summarize_distributions(df), os.path.join(PLOTS_DIR, 'main', 'distribution_summary.csv'))
    log_and_print(top_correlated_pairs(correlation_matrix(df), n=5).to_string(index=False))

    print("Splitting data...")
    train_df, test_df = split_data(df, random_state=RANDOM_STATE)
    folds = make_folds(train_df, n_folds=N_FOLDS, random_state=RANDOM_STATE)

    print("Tuning cluster counts...")
    results = {}
    for algorithm in ALGORITHMS:
        for n_components in (None, N_PCA_COMPONENTS):
            name = f"{algorithm} + PCA" if n_components else algorithm
            results[name] = tune(algorithm, train_df, folds, CANDIDATE_COUNTS, n_components=n_components)
            save_table(results[name], os.path.join(PLOTS_DIR, 'main', f"tuning_{name.replace(' + ', '_')}.csv"), index=False)

    comparison = compare_pipelines(results)
    log_and_print(comparison.to_string(index=False))

    print("Fitting final k-means model...")
    best_k = select_best_count(results['kmeans + PCA'])
    pipeline = ClusterPipeline('kmeans', best_k, n_components=N_PCA_COMPONENTS).fit(train_df)
    log_and_print(pipeline.cluster_sizes().to_string())
    log_and_print(pipeline.centroids(space='original').round(3).to_string())

    print("Predicting test split...")
    predictions = pipeline.predict(test_df)
    log_and_print(predictions.value_counts().sort_index().to_string())
    return pipeline, comparison


if __name__ == "__main__":
    setup_environment()
    try:
        run_pipeline(sys.argv[1] if len(sys.argv) > 1 else DATA_PATH)
    except WineClusteringError as e:
        print(f"Run failed at stage '{e.stage}': {e}", file=sys.stderr)
        sys.exit(1)
