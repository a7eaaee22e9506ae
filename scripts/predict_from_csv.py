"""
Prediction script for the wine cluster model.

This script takes a CSV file with the 13 wine chemistry measurements, passes it
through the saved training-split preprocessing and cluster model, and writes a
new CSV with the assigned cluster for each row.

Example usage:  python ./scripts/predict_from_csv.py --model ./models/cluster_pipeline.joblib --input ./data/new_wines.csv --output ./data/predictions.csv
"""
import os
import sys
import argparse
import pandas as pd

# Add project root to Python path to allow importing the package without installing it
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.append(str(PROJECT_ROOT))

from wine_clustering.config import FEATURE_COLUMNS
from wine_clustering.data import validate_observation_table
from wine_clustering.errors import InputValidationError, WineClusteringError
from wine_clustering.predictor import ClusterPipeline, assign_clusters


def load_input(input_path):
    """Reads the input CSV and checks the required feature columns."""
    if not os.path.exists(input_path):
        raise InputValidationError(f"Input file not found at: {input_path}")
    try:
        df = pd.read_csv(input_path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InputValidationError(f"Could not parse {input_path}: {e}") from e
    features = validate_observation_table(df, expected_columns=FEATURE_COLUMNS)
    print("Input columns validated.")
    return df, features


def make_predictions(pipeline, input_df, features):
    """Adds the cluster assignment to the original input rows."""
    print(f"Assigning {len(features)} rows with {pipeline.algorithm} (k={pipeline.n_clusters})...")
    out = input_df.copy()
    out['cluster'] = assign_clusters(features, pipeline)['cluster']
    return out


def main():
    parser = argparse.ArgumentParser(description="Assign wine samples to clusters using a saved pipeline.")
    parser.add_argument("--model", required=True, help="Path to the saved ClusterPipeline (.joblib).")
    parser.add_argument("--input", required=True, help="CSV with the wine feature columns.")
    parser.add_argument("--output", required=True, help="Where to write the CSV with a 'cluster' column.")
    args = parser.parse_args()

    try:
        pipeline = ClusterPipeline.load(args.model)
        print("Successfully loaded cluster pipeline.")
        input_df, features = load_input(args.input)
        predictions = make_predictions(pipeline, input_df, features)
    except (WineClusteringError, FileNotFoundError) as e:
        print(f"Prediction failed: {e}", file=sys.stderr)
        sys.exit(1)

    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    predictions.to_csv(args.output, index=False)
    print(f"Success! Predictions saved to {args.output}")


if __name__ == "__main__":
    main()
