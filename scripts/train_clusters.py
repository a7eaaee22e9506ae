"""
Training script for the wine cluster model.

Tunes the number of clusters by 10-fold cross-validated silhouette on the
training split, fits the chosen pipeline and saves it with joblib.

Example usage:  python ./scripts/train_clusters.py --algorithm kmeans --pca-components 4 --output ./models/cluster_pipeline.joblib
"""
import os
import sys
import argparse

# Add project root to Python path to allow importing the package without installing it
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.append(str(PROJECT_ROOT))

from wine_clustering.config import CANDIDATE_COUNTS, DATA_PATH, N_FOLDS, N_PCA_COMPONENTS, PIPELINE_PATH, RANDOM_STATE
from wine_clustering.data import load_wine_data, split_data
from wine_clustering.errors import WineClusteringError
from wine_clustering.predictor import ClusterPipeline
from wine_clustering.tuning import tune_cluster_count


def train(data_path, algorithm, n_components, output_path, n_folds=N_FOLDS, random_state=RANDOM_STATE):
    df = load_wine_data(data_path)
    train_df, test_df = split_data(df, random_state=random_state)

    best_k, results = tune_cluster_count(
        algorithm, train_df, candidate_counts=CANDIDATE_COUNTS, n_folds=n_folds,
        n_components=n_components, random_state=random_state
    )
    print(results.to_string(index=False))
    print(f"Selected k = {best_k}")

    pipeline = ClusterPipeline(algorithm, best_k, n_components=n_components, random_state=random_state).fit(train_df)
    print(pipeline.cluster_sizes().to_string())
    pipeline.save(output_path)
    return pipeline


def main():
    parser = argparse.ArgumentParser(description="Tune and fit the wine clustering pipeline.")
    parser.add_argument("--data", default=DATA_PATH, help="Path to the wine CSV file.")
    parser.add_argument("--algorithm", default="kmeans", choices=["kmeans", "hierarchical"])
    parser.add_argument("--pca-components", type=int, default=N_PCA_COMPONENTS,
                        help="Number of PCA components; 0 disables PCA.")
    parser.add_argument("--folds", type=int, default=N_FOLDS)
    parser.add_argument("--output", default=PIPELINE_PATH, help="Where to save the fitted pipeline.")
    args = parser.parse_args()

    try:
        train(args.data, args.algorithm, args.pca_components or None, args.output, n_folds=args.folds)
    except WineClusteringError as e:
        print(f"Training failed at stage '{e.stage}': {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
