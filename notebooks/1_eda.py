#!/usr/bin/env python
# coding: utf-8

# %% [markdown]
# # Exploratory Data Analysis of Wine Chemistry
#
# ## 1. Objective
#
# This notebook is the first step of an unsupervised analysis of 178 wines described by 13 chemical measurements (alcohol, malic acid, ash, phenols, colour intensity, proline and others). There is no label column: the goal of the project is to find natural groups of wines with clustering.
#
# Before clustering we need to understand the data:
#
# - **Data quality:** every column must be numeric and complete. Distance-based methods cannot handle missing values, and imputation is out of scope here, so the check is a hard gate.
# - **Distributions:** the features live on very different scales (proline is in the hundreds, hue is around 1), which tells us standardization is mandatory before k-means or Ward clustering.
# - **Correlations:** strongly correlated features carry redundant information and over-weight one direction in Euclidean distance. This is the motivation for trying PCA before clustering in the next notebook.

# %% [markdown]
# ## 1. Environment Setup and Data Loading

# %%
import os
import sys
import matplotlib.pyplot as plt
from IPython.display import display

# Ensure the project root is on sys.path for package imports
try:
    # Assumes the script is in the 'notebooks' directory
    PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
except NameError:
    # Fallback for interactive environments (Jupyter, VSCode)
    PROJECT_ROOT = os.path.abspath(os.path.join(os.getcwd(), '..'))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wine_clustering.config import DATA_PATH, PLOTS_DIR
from wine_clustering.data import load_wine_data
from wine_clustering.eda import (
    check_missing_values,
    summarize_distributions,
    correlation_matrix,
    top_correlated_pairs,
    perform_normality_tests
)
from wine_clustering.utils import setup_environment, save_plot, save_table, style_df, log_and_print
from wine_clustering.viz import plot_numeric_histograms, plot_correlation_heatmap

# --- Setup Environment & Define Paths ---
setup_environment()
EDA_DIR = os.path.join(PLOTS_DIR, '1_eda')
os.makedirs(EDA_DIR, exist_ok=True)

HIST_PATH = os.path.join(EDA_DIR, 'eda_numeric_histograms.pdf')
CORR_MATRIX_PATH = os.path.join(EDA_DIR, 'eda_corr_matrix.pdf')
SUMMARY_PATH = os.path.join(EDA_DIR, 'eda_distribution_summary.csv')

df = load_wine_data(DATA_PATH)
log_and_print(f"Wine dataframe shape: {df.shape}")
display(style_df(df.head()))

# %% [markdown]
# ## 2. Data Quality
#
# All 13 columns were parsed as numbers by the loader. We now confirm there are no missing values; the check raises if any column has a gap, since the clustering workflow would then need a cleaning step first.

# %%
missing_report = check_missing_values(df)
log_and_print(f"Total missing values: {int(missing_report['Missing'].sum())}")
display(style_df(missing_report))

# %% [markdown]
# ## 3. Feature Distributions
#
# A summary table with skewness and kurtosis, followed by one histogram per feature.

# %%
summary = summarize_distributions(df)
save_table(summary, SUMMARY_PATH)
display(style_df(summary))

# %%
fig_hist = plot_numeric_histograms(df)
save_plot(fig_hist, HIST_PATH)
fig_hist.show()

# %%
normality_results = perform_normality_tests(df)
log_and_print("\n--- Normality Tests (Shapiro-Wilk) ---")
display(style_df(normality_results.sort_values(by="P-Value", ascending=False)))

# %% [markdown]
# **Observations:**
#
# *   **Different scales:** `Proline` and `Magnesium` are orders of magnitude larger than `Hue` or `Nonflavanoid_Phenols`. Without standardization they would dominate every Euclidean distance.
# *   **Shape:** several features (`Malic_Acid`, `Color_Intensity`, `Proline`) are right-skewed, while others are close to symmetric. Most fail the Shapiro-Wilk test, which is not a problem for clustering but is worth knowing when reading cluster means.

# %% [markdown]
# ## 4. Correlation Analysis
#
# We compute the full Pearson correlation matrix and list the most strongly correlated pairs.

# %%
corr = correlation_matrix(df)
fig_corr = plot_correlation_heatmap(corr)
save_plot(fig_corr, CORR_MATRIX_PATH)
plt.show()

# %%
top_pairs = top_correlated_pairs(corr, n=10)
log_and_print("Most strongly correlated feature pairs:")
display(style_df(top_pairs))

# %% [markdown]
# **Interpretation:**
#
# *   `Flavanoids`, `Total_Phenols` and `OD280` are strongly positively correlated with each other, and all three correlate negatively with `Nonflavanoid_Phenols`. These features describe largely the same underlying "phenolic" dimension.
# *   Such multicollinearity means Euclidean distance on standardized features counts that direction several times. Projecting onto a handful of principal components collapses the redundant directions, which is the hypothesis tested in the next notebook.
#
# ## 5. Next Steps
#
# **Next Notebook: [2_clustering_and_pca.py](2_clustering_and_pca.py)**
