"""
config.py

Paths, seeds and workflow constants for the wine clustering analysis.
Values can be overridden from a `.env` file at the project root.
"""

import os
from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

load_dotenv(os.path.join(PROJECT_ROOT, '.env'))

# ----- Data -----
DATA_PATH = os.getenv("WINE_DATA_PATH", os.path.join(PROJECT_ROOT, 'data', 'raw', 'wine-clustering.csv'))
FEATURE_COLUMNS = [
    "Alcohol",
    "Malic_Acid",
    "Ash",
    "Ash_Alcanity",
    "Magnesium",
    "Total_Phenols",
    "Flavanoids",
    "Nonflavanoid_Phenols",
    "Proanthocyanins",
    "Color_Intensity",
    "Hue",
    "OD280",
    "Proline",
]

# ----- Reproducibility -----
RANDOM_STATE = int(os.getenv("WINE_RANDOM_STATE", "42"))

# ----- Split and tuning -----
TEST_SIZE = 0.25
N_FOLDS = int(os.getenv("WINE_N_FOLDS", "10"))
CANDIDATE_COUNTS = list(range(1, 11))
ALGORITHMS = ["kmeans", "hierarchical"]

# ----- PCA -----
# Fixed component count; not derived from an explained-variance threshold.
N_PCA_COMPONENTS = int(os.getenv("WINE_PCA_COMPONENTS", "4"))

# ----- Outputs -----
PLOTS_DIR = os.getenv("WINE_PLOTS_DIR", os.path.join(PROJECT_ROOT, 'plots'))
MODELS_DIR = os.getenv("WINE_MODELS_DIR", os.path.join(PROJECT_ROOT, 'models'))
PIPELINE_PATH = os.path.join(MODELS_DIR, 'cluster_pipeline.joblib')
