# %% [markdown]
# # Unsupervised Learning: Clustering Wines with and without PCA
#
# ## 1. Objective
#
# This notebook groups the wines into clusters using two algorithm families, **k-means** and **agglomerative clustering with Ward linkage**, and tests whether a **4-component PCA** step before clustering improves cluster separation.
#
# ## 2. Approach
#
# - **Train/test split:** 75% of the rows train the models; the remaining 25% are only used to check that new samples are assigned with parameters learned from training data.
# - **Preprocessing:** zero-variance columns are dropped, each feature is standardized with the training mean and standard deviation, and optionally projected onto 4 principal components.
# - **Tuning:** for each candidate number of clusters (1 to 10), 10-fold cross-validation fits the preprocessing and the clustering on nine folds and scores the held-out fold by its mean **silhouette coefficient**. The count with the highest mean wins; ties go to the smaller count. A single cluster has no silhouette and is skipped.

# %%

# --- Imports and Setup ---
import os
import sys
import pandas as pd
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

from wine_clustering.config import (
    DATA_PATH, PLOTS_DIR, MODELS_DIR, RANDOM_STATE, N_FOLDS, N_PCA_COMPONENTS, CANDIDATE_COUNTS
)
from wine_clustering.data import load_wine_data, split_data
from wine_clustering.preprocessing import fit_preprocessor, pca_summary, pca_loadings
from wine_clustering.tuning import make_folds, tune, select_best_count, find_elbow_point, compare_pipelines
from wine_clustering.predictor import ClusterPipeline, cluster_profile
from wine_clustering.viz import (
    plot_pca_variance,
    plot_silhouette_scores,
    plot_elbow_inertia_with_marker,
    plot_cluster_hulls,
    plot_dendrogram,
    plot_feature_scatter,
    plot_feature_by_cluster
)
from wine_clustering.utils import setup_environment, save_plot, save_table, log_and_print, style_df

# --- Setup environment and paths ---
setup_environment()
CLUSTER_DIR = os.path.join(PLOTS_DIR, '2_clustering_and_pca')
os.makedirs(CLUSTER_DIR, exist_ok=True)

PCA_VAR_PATH = os.path.join(CLUSTER_DIR, 'clustering_pca_variance.pdf')
SILHOUETTE_PATH = os.path.join(CLUSTER_DIR, 'clustering_silhouette_scores.pdf')
ELBOW_PATH = os.path.join(CLUSTER_DIR, 'clustering_elbow_kmeans_pca.pdf')
KMEANS_HULL_PATH = os.path.join(CLUSTER_DIR, 'clustering_kmeans_hulls.pdf')
KMEANS_PCA_HULL_PATH = os.path.join(CLUSTER_DIR, 'clustering_kmeans_pca_hulls.pdf')
HIER_HULL_PATH = os.path.join(CLUSTER_DIR, 'clustering_hierarchical_pca_hulls.pdf')
DENDROGRAM_PATH = os.path.join(CLUSTER_DIR, 'clustering_dendrogram.pdf')
SCATTER_PATH = os.path.join(CLUSTER_DIR, 'clustering_feature_scatter.html')
PROLINE_BOX_PATH = os.path.join(CLUSTER_DIR, 'clustering_proline_by_cluster.pdf')
TUNING_TABLE_PATH = os.path.join(CLUSTER_DIR, 'clustering_tuning_results.csv')
CENTROID_TABLE_PATH = os.path.join(CLUSTER_DIR, 'clustering_centroids.csv')
PROFILE_TABLE_PATH = os.path.join(CLUSTER_DIR, 'clustering_cluster_profile.csv')
PIPELINE_PATH = os.path.join(MODELS_DIR, 'cluster_pipeline.joblib')

df = load_wine_data(DATA_PATH)
train_df, test_df = split_data(df, random_state=RANDOM_STATE)
folds = make_folds(train_df, n_folds=N_FOLDS, random_state=RANDOM_STATE)
log_and_print(f"{len(folds)} cross-validation folds over {len(train_df)} training rows.")

# %% [markdown]
# ## 3. PCA on the Training Split
#
# Before tuning, we look at how much variance the first principal components of the standardized training data explain. The number of components is fixed at 4 for this workflow; the plot shows what that choice retains.

# %%
pca_preprocessor = fit_preprocessor(train_df, n_components=N_PCA_COMPONENTS)
display(style_df(pca_summary(pca_preprocessor)))

# %%
fig_pca_variance = plot_pca_variance(pca_preprocessor)
save_plot(fig_pca_variance, PCA_VAR_PATH)
fig_pca_variance.show()

# %%
display(style_df(pca_loadings(pca_preprocessor).round(3)))

# %% [markdown]
# ## 4. Tuning the Number of Clusters
#
# Four pipelines are tuned on the same folds: k-means and Ward clustering, each with and without PCA.

# %%
tuning_results = {}
for algorithm in ['kmeans', 'hierarchical']:
    for n_components in (None, N_PCA_COMPONENTS):
        name = f"{algorithm} + PCA" if n_components else algorithm
        tuning_results[name] = tune(algorithm, train_df, folds, CANDIDATE_COUNTS, n_components=n_components)

best_counts = {name: select_best_count(results) for name, results in tuning_results.items()}
for name, results in tuning_results.items():
    log_and_print(f"\n--- {name} ---")
    log_and_print(results.round(4).to_string(index=False))

all_results = [results.assign(pipeline=name) for name, results in tuning_results.items()]
save_table(pd.concat(all_results, ignore_index=True), TUNING_TABLE_PATH, index=False)

# %%
fig_silhouette = plot_silhouette_scores(tuning_results, best_counts)
save_plot(fig_silhouette, SILHOUETTE_PATH)
fig_silhouette.show()

# %%
comparison = compare_pipelines(tuning_results)
display(style_df(comparison))

# %% [markdown]
# For context we also look at the within-cluster sum of squares of the PCA k-means pipeline. The elbow is a weaker criterion than the silhouette but should point to a similar count.

# %%
kmeans_pca_results = tuning_results['kmeans + PCA']
optimal_k_elbow = find_elbow_point(kmeans_pca_results['mean_sse_within'], kmeans_pca_results['n_clusters'])
log_and_print(f"Elbow method suggests k = {optimal_k_elbow}; silhouette selects k = {best_counts['kmeans + PCA']}.")
fig_elbow = plot_elbow_inertia_with_marker(kmeans_pca_results['mean_sse_within'], kmeans_pca_results['n_clusters'], optimal_k_elbow)
save_plot(fig_elbow, ELBOW_PATH)
fig_elbow.show()

# %% [markdown]
# **Insight:** Compare the best counts and scores in the table above. On this dataset the PCA pipelines reach higher mean silhouette scores than their plain counterparts. The correlated phenolic features found in the EDA no longer dominate the distances once they are collapsed into a few components.

# %% [markdown]
# ## 5. Fitting the Final Models
#
# ### K-means, with and without PCA

# %%
kmeans_plain = ClusterPipeline('kmeans', best_counts['kmeans'], random_state=RANDOM_STATE).fit(train_df)
kmeans_pca = ClusterPipeline('kmeans', best_counts['kmeans + PCA'], n_components=N_PCA_COMPONENTS, random_state=RANDOM_STATE).fit(train_df)

log_and_print("Cluster sizes (k-means + PCA):")
log_and_print(kmeans_pca.cluster_sizes().to_string())

centroids = kmeans_pca.centroids(space='original')
save_table(centroids, CENTROID_TABLE_PATH)
display(style_df(centroids))

# %%
fig_hull_plain = plot_cluster_hulls(
    kmeans_plain.transform(train_df), kmeans_plain.labels_, kmeans_plain.centroids(),
    title=f"K-means (k = {kmeans_plain.n_clusters}) on Standardized Features"
)
save_plot(fig_hull_plain, KMEANS_HULL_PATH)
fig_hull_plain.show()

fig_hull_pca = plot_cluster_hulls(
    kmeans_pca.transform(train_df)[['PC1', 'PC2']], kmeans_pca.labels_, kmeans_pca.centroids()[['PC1', 'PC2']],
    title=f"K-means (k = {kmeans_pca.n_clusters}) on {N_PCA_COMPONENTS} Principal Components"
)
save_plot(fig_hull_pca, KMEANS_PCA_HULL_PATH)
fig_hull_pca.show()

# %% [markdown]
# ### Hierarchical clustering (Ward linkage)
#
# The dendrogram shows the full merge order; the red line is where the tree is cut to give the selected number of clusters.

# %%
hierarchical_pca = ClusterPipeline('hierarchical', best_counts['hierarchical + PCA'], n_components=N_PCA_COMPONENTS).fit(train_df)

fig_dendrogram = plot_dendrogram(hierarchical_pca.model)
save_plot(fig_dendrogram, DENDROGRAM_PATH)
plt.show()

fig_hull_hier = plot_cluster_hulls(
    hierarchical_pca.transform(train_df)[['PC1', 'PC2']], hierarchical_pca.labels_,
    title=f"Ward Clustering (k = {hierarchical_pca.n_clusters}) on {N_PCA_COMPONENTS} Principal Components"
)
save_plot(fig_hull_hier, HIER_HULL_PATH)
fig_hull_hier.show()

# Cross-tabulate the two families' memberships on the training rows
display(style_df(pd.crosstab(kmeans_pca.labels_, hierarchical_pca.labels_, rownames=['k-means'], colnames=['Ward'])))

# %% [markdown]
# ## 6. Interpreting Clusters in Original Units

# %%
profile = cluster_profile(train_df, kmeans_pca.labels_)
save_table(profile, PROFILE_TABLE_PATH)
display(style_df(profile))

# %%
fig_scatter = plot_feature_scatter(train_df, kmeans_pca.labels_, x='Proline', y='Flavanoids')
fig_scatter.write_html(SCATTER_PATH)
fig_scatter.show()

fig_box = plot_feature_by_cluster(train_df, kmeans_pca.labels_, 'Proline')
save_plot(fig_box, PROLINE_BOX_PATH)
fig_box.show()

# %% [markdown]
# ## 7. Assigning New Wines
#
# The held-out test rows are passed through the **training-split** standardization and PCA rotation, then assigned to the nearest training centroid. Ward clustering does not define membership for unseen points, so only the k-means pipeline is used here.

# %%
test_clusters = kmeans_pca.predict(test_df)
log_and_print("Predicted clusters for the test split:")
log_and_print(test_clusters.value_counts().sort_index().to_string())
display(style_df(test_df.assign(cluster=test_clusters).head(10)))

# %%
kmeans_pca.save(PIPELINE_PATH)

# %% [markdown]
# ## 8. Conclusion
#
# 1.  **A small number of wine groups:** the cross-validated silhouette selects a low cluster count, and the profile table shows the groups differ mainly in proline, flavanoids and colour intensity.
# 2.  **PCA helps:** clustering on 4 principal components gives higher mean silhouette scores than clustering on all 13 standardized features, consistent with the multicollinearity seen in the EDA.
# 3.  **No leakage:** new samples are assigned with the training-split transform and centroids. The saved pipeline can be applied to a CSV of new wines with `scripts/predict_from_csv.py`.
