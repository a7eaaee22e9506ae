import textwrap

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import seaborn as sns
from plotly.subplots import make_subplots
from scipy.cluster.hierarchy import dendrogram
from scipy.spatial import ConvexHull, QhullError
from sklearn.decomposition import PCA

from .preprocessing import pca_summary

# --- Visualization Style Constants ---
PLOTLY_TEMPLATE = "plotly_white"
FONT_FAMILY = "Segoe UI, Arial, sans-serif"
FONT_SIZE = 14
TITLE_SIZE = 20
AXIS_TITLE_SIZE = 16
TICK_SIZE = 13
LEGEND_SIZE = 13
COLOR_SEQ = px.colors.qualitative.Safe


# --- Consistent Layout Function for Plotly ---
def _apply_common_layout(fig, title):
    fig.update_layout(
        title_text=title,
        title_x=0.5,
        title_font=dict(family=FONT_FAMILY, size=TITLE_SIZE, color="#222"),
        template=PLOTLY_TEMPLATE,
        font=dict(family=FONT_FAMILY, size=FONT_SIZE, color="#222"),
        margin=dict(t=60, l=60, r=40, b=50),
        autosize=True,
        legend=dict(
            font=dict(size=LEGEND_SIZE),
            bgcolor="rgba(255,255,255,0.8)",
            bordercolor="#DDD",
            borderwidth=1
        ),
        plot_bgcolor="#fff",
        paper_bgcolor="#fff"
    )
    fig.update_xaxes(
        title_font=dict(size=AXIS_TITLE_SIZE, family=FONT_FAMILY, color="#222"),
        tickfont=dict(size=TICK_SIZE, family=FONT_FAMILY, color="#222"),
        showgrid=True, gridwidth=0.5, gridcolor="#e5e5e5"
    )
    fig.update_yaxes(
        title_font=dict(size=AXIS_TITLE_SIZE, family=FONT_FAMILY, color="#222"),
        tickfont=dict(size=TICK_SIZE, family=FONT_FAMILY, color="#222"),
        showgrid=True, gridwidth=0.5, gridcolor="#e5e5e5"
    )
    return fig


def _cluster_color(cluster_id):
    return COLOR_SEQ[int(cluster_id) % len(COLOR_SEQ)]


def plot_numeric_histograms(df, bins=30):
    """Grid of histograms, one panel per numeric column."""
    numeric_cols = df.select_dtypes(include=[np.number]).columns
    n_cols = len(numeric_cols)
    ncols = min(4, n_cols)
    nrows = (n_cols + ncols - 1) // ncols

    wrapped_titles = ['<span style="font-size:11px">' + '<br>'.join(textwrap.wrap(title, width=20)) + '</span>' for title in numeric_cols]
    fig = make_subplots(rows=nrows, cols=ncols, subplot_titles=wrapped_titles)

    for i, col in enumerate(numeric_cols):
        row, col_idx = divmod(i, ncols)
        fig.add_trace(
            go.Histogram(x=df[col].dropna(), nbinsx=bins, name=col, marker_color=COLOR_SEQ[i % len(COLOR_SEQ)]),
            row=row + 1, col=col_idx + 1
        )

    fig.update_layout(showlegend=False, height=300 * nrows, autosize=True)
    return _apply_common_layout(fig, "Feature Distributions")


def plot_correlation_heatmap(corr, title='Correlation Matrix: Wine Chemical Properties'):
    """Annotated heatmap of a correlation matrix. Returns a Matplotlib figure."""
    fig, ax = plt.subplots(figsize=(10, 8))
    sns.heatmap(
        corr,
        annot=True,
        fmt='.2f',
        cmap='coolwarm',
        vmin=-1, vmax=1,
        square=True,
        annot_kws={"size": 8},
        cbar_kws={"shrink": 0.8},
        ax=ax
    )
    ax.set_title(title, fontsize=12, pad=15)
    plt.setp(ax.get_xticklabels(), fontsize=8, rotation=45, ha='right')
    plt.setp(ax.get_yticklabels(), fontsize=8, rotation=0)
    fig.tight_layout()
    return fig


def plot_pca_variance(preprocessor):
    """Per-component and cumulative explained variance ratio of the fitted PCA step."""
    summary = pca_summary(preprocessor)
    fig = go.Figure()
    fig.add_trace(go.Bar(x=summary['Component'], y=summary['Variance Ratio'], name='Per Component', marker_color=COLOR_SEQ[0]))
    fig.add_trace(go.Scatter(x=summary['Component'], y=summary['Cumulative Ratio'], mode='lines+markers', name='Cumulative', line=dict(color=COLOR_SEQ[1])))
    fig.update_layout(xaxis_title='Principal Component', yaxis_title='Explained Variance Ratio', yaxis_range=[0, 1.05])
    return _apply_common_layout(fig, "PCA Explained Variance")


def plot_silhouette_scores(results_by_name, best_counts=None):
    """Mean cross-validated silhouette per cluster count, one line per pipeline."""
    fig = go.Figure()
    for i, (name, results) in enumerate(results_by_name.items()):
        scored = results.dropna(subset=['mean_silhouette'])
        color = COLOR_SEQ[i % len(COLOR_SEQ)]
        fig.add_trace(go.Scatter(
            x=scored['n_clusters'],
            y=scored['mean_silhouette'],
            error_y=dict(type='data', array=scored['std_silhouette'], visible=True, thickness=1),
            mode='lines+markers',
            name=name,
            line=dict(color=color)
        ))
        if best_counts and name in best_counts:
            best_k = best_counts[name]
            best_score = scored.loc[scored['n_clusters'] == best_k, 'mean_silhouette'].iloc[0]
            fig.add_trace(go.Scatter(
                x=[best_k], y=[best_score], mode='markers',
                marker=dict(size=14, color=color, symbol='star', line=dict(color='#111', width=1)),
                name=f'{name}: best k = {best_k}', showlegend=True
            ))
    fig.update_layout(xaxis_title='Number of Clusters (k)', yaxis_title='Mean Silhouette (10-fold CV)')
    return _apply_common_layout(fig, 'Cross-Validated Silhouette Scores')


def plot_elbow_inertia_with_marker(sse_values, k_range, optimal_k):
    """
    Plot the elbow curve of within-cluster SSE and mark the elbow.

    Parameters:
    - sse_values: Mean within-cluster SSE for each k.
    - k_range: Range of k values corresponding to the SSE values.
    - optimal_k: The elbow k, or None when no knee was found.

    Returns:
    - fig: Plotly figure object.
    """
    k_range = list(k_range)
    sse_values = list(sse_values)
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=k_range, y=sse_values, mode='lines+markers', name='Within-cluster SSE'))
    if optimal_k is not None:
        fig.add_trace(go.Scatter(x=[optimal_k], y=[sse_values[k_range.index(optimal_k)]],
                                 mode='markers', marker=dict(size=10, color='red'), name=f'Elbow k = {optimal_k}'))
    fig.update_layout(xaxis_title='Number of Clusters (k)', yaxis_title='Within-cluster SSE')
    return _apply_common_layout(fig, 'Elbow Method for Optimal k')


def _ellipse_path(points, n_std=2.0, n_points=60):
    """Outline of the covariance ellipse of a small 2D point set."""
    center = points.mean(axis=0)
    if len(points) < 2:
        return None
    cov = np.cov(points, rowvar=False)
    vals, vecs = np.linalg.eigh(cov)
    vals = np.clip(vals, 0, None)
    t = np.linspace(0, 2 * np.pi, n_points)
    circle = np.stack([np.cos(t), np.sin(t)])
    outline = (vecs @ np.diag(n_std * np.sqrt(vals)) @ circle).T + center
    return outline


def _hull_path(points):
    """Closed convex hull outline; falls back to an ellipse for degenerate sets."""
    if len(points) >= 3:
        try:
            hull = ConvexHull(points)
            vertices = np.append(hull.vertices, hull.vertices[0])
            return points[vertices]
        except QhullError:
            pass
    return _ellipse_path(points)


def plot_cluster_hulls(X, labels, centers=None, title='Clusters'):
    """
    2D cluster plot with a convex hull around each cluster.

    Data with more than two columns is projected onto its first two principal
    axes for display; `centers` are projected the same way.
    """
    X = np.asarray(X, dtype=float)
    labels = np.asarray(labels)
    axis_names = ['Dim 1', 'Dim 2']
    if X.shape[1] > 2:
        projector = PCA(n_components=2).fit(X)
        X_2d = projector.transform(X)
        centers_2d = projector.transform(np.asarray(centers, dtype=float)) if centers is not None else None
        ratio = projector.explained_variance_ratio_
        axis_names = [f'Dim 1 ({ratio[0]:.1%})', f'Dim 2 ({ratio[1]:.1%})']
    else:
        X_2d = X
        centers_2d = np.asarray(centers, dtype=float) if centers is not None else None

    fig = go.Figure()
    for cluster_id in np.unique(labels):
        points = X_2d[labels == cluster_id]
        color = _cluster_color(cluster_id)
        outline = _hull_path(points)
        if outline is not None:
            fig.add_trace(go.Scatter(
                x=outline[:, 0], y=outline[:, 1], mode='lines', fill='toself',
                line=dict(color=color, width=1), opacity=0.25, hoverinfo='skip', showlegend=False
            ))
        fig.add_trace(go.Scatter(
            x=points[:, 0], y=points[:, 1], mode='markers',
            marker=dict(color=color, size=8, line=dict(color='#fff', width=0.5)),
            name=f'Cluster {cluster_id}'
        ))
    if centers_2d is not None:
        fig.add_trace(go.Scatter(
            x=centers_2d[:, 0], y=centers_2d[:, 1], mode='markers',
            marker=dict(symbol='x', size=14, color='#111'), name='Centroids'
        ))
    fig.update_layout(xaxis_title=axis_names[0], yaxis_title=axis_names[1], legend_title='Cluster')
    return _apply_common_layout(fig, title)


def plot_dendrogram(strategy, title='Ward Linkage Dendrogram'):
    """Dendrogram of a fitted hierarchical strategy with its cut height marked."""
    cut = strategy.cut_height()
    fig, ax = plt.subplots(figsize=(15, 7))
    dendrogram(
        strategy.linkage_,
        orientation='top',
        color_threshold=cut,
        distance_sort='descending',
        no_labels=True,
        ax=ax
    )
    ax.axhline(cut, color='red', linestyle='--', linewidth=1)
    ax.set_title(f"{title} (cut at k = {strategy.n_clusters})", fontsize=14, pad=15)
    ax.set_ylabel("Merge distance", fontsize=12)
    fig.tight_layout()
    return fig


def plot_feature_scatter(df, labels, x, y, title=None):
    """Interactive scatter of two original features coloured by cluster."""
    plot_df = df.copy()
    plot_df['cluster'] = pd.Series(np.asarray(labels), index=df.index).astype(str)
    fig = px.scatter(
        plot_df,
        x=x, y=y,
        color='cluster',
        color_discrete_sequence=COLOR_SEQ,
        category_orders={'cluster': sorted(plot_df['cluster'].unique(), key=int)},
        hover_data=[col for col in df.columns if col not in (x, y)],
        labels={'cluster': 'Cluster'}
    )
    fig.update_traces(marker=dict(size=9, opacity=0.8))
    return _apply_common_layout(fig, title or f'{y} vs. {x} by Cluster')


def plot_feature_by_cluster(df, labels, feature):
    """Distribution of one original feature within each cluster."""
    plot_df = df[[feature]].copy()
    plot_df['cluster'] = pd.Series(np.asarray(labels), index=df.index).astype(str)
    fig = px.box(
        plot_df,
        x='cluster',
        y=feature,
        color='cluster',
        color_discrete_sequence=COLOR_SEQ,
        category_orders={'cluster': sorted(plot_df['cluster'].unique(), key=int)},
        labels={'cluster': 'Cluster'},
    )
    return _apply_common_layout(fig, f'{feature} Distribution by Cluster')
