"""
Visualization utilities for clot proteomics analysis.

Plotting is a reporting layer on top of the analysis results; nothing in the
analysis modules depends on it.
"""

import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd
from typing import Optional, Tuple, Sequence
from pathlib import Path

from ..config.settings import FIGURES_DIR


class ProteomicsVisualizer:
    """
    Visualization utilities for clot proteomics analysis.

    Provides embeddings, correlation matrices, heatmaps and importance charts
    for results presentation.
    """

    def __init__(self, save_dir: Optional[Path] = None, figsize: Tuple[int, int] = (10, 6)):
        """
        Initialize the visualizer.

        Args:
            save_dir: Directory to save figures. If None, uses default from config.
            figsize: Default figure size for plots.
        """
        self.save_dir = Path(save_dir or FIGURES_DIR)
        self.figsize = figsize

    def embedding_plot(self, coordinates: pd.DataFrame, samples: Optional[pd.DataFrame] = None,
                       hue: Optional[str] = None, title: Optional[str] = None,
                       axis_labels: Optional[Sequence[str]] = None,
                       save_name: Optional[str] = None) -> plt.Figure:
        """
        Scatter plot of a 2D sample embedding (PCA scores or UMAP).

        Args:
            coordinates: DataFrame indexed by sample; first two columns are plotted
            samples: Sample metadata used for colouring
            hue: Metadata column for color coding
            title: Plot title
            axis_labels: Labels for the x and y axes
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        x, y = coordinates.columns[:2]
        data = coordinates[[x, y]].copy()
        if samples is not None and hue:
            data[hue] = samples[hue].reindex(data.index).astype(str)

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.scatterplot(data=data, x=x, y=y, hue=hue if hue in data.columns else None,
                        ax=ax, alpha=0.8, s=60)

        if title:
            ax.set_title(title, fontsize=14, fontweight='bold')
        labels = axis_labels or (x, y)
        ax.set_xlabel(labels[0], fontsize=12)
        ax.set_ylabel(labels[1], fontsize=12)

        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def pca_plot(self, pca_result, samples: Optional[pd.DataFrame] = None,
                 hue: Optional[str] = None, save_name: Optional[str] = None) -> plt.Figure:
        """PCA scatter of the first two components with variance explained on the axes."""
        ratio = pca_result.explained_variance_ratio
        labels = [f"{pc} ({100 * ratio[pc]:.1f}%)" for pc in ratio.index[:2]]
        return self.embedding_plot(
            pca_result.scores, samples, hue=hue, title='PCA of Normalized Abundance',
            axis_labels=labels, save_name=save_name
        )

    def correlation_matrix_plot(self, correlations: pd.DataFrame,
                                non_significant: pd.DataFrame,
                                title: str = "Spearman Correlation: Metadata vs PCs",
                                save_name: Optional[str] = None) -> plt.Figure:
        """
        Correlation heatmap with non-significant cells crossed out.

        Args:
            correlations: Fields x components correlation matrix
            non_significant: Boolean mask of the same shape
            title: Plot title
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        fig, ax = plt.subplots(figsize=(8, max(4, 0.5 * len(correlations))))

        sns.heatmap(correlations.astype(float), annot=True, fmt='.2f', cmap='coolwarm',
                    center=0, vmin=-1, vmax=1, ax=ax, cbar_kws={'label': 'rho'})

        for i, field in enumerate(correlations.index):
            for j, component in enumerate(correlations.columns):
                if non_significant.loc[field, component]:
                    ax.plot([j, j + 1], [i, i + 1], color='black', linewidth=0.8)
                    ax.plot([j, j + 1], [i + 1, i], color='black', linewidth=0.8)

        ax.set_title(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def abundance_heatmap(self, matrix: pd.DataFrame, proteins: Sequence[str],
                          labels: Optional[pd.Series] = None,
                          title: str = "Normalized Abundance",
                          save_name: Optional[str] = None) -> plt.Figure:
        """
        Row-centred heatmap of selected proteins.

        Args:
            matrix: Proteins x samples
            proteins: UniProt_IDs to show, in order
            labels: Optional row labels (e.g. gene names) indexed by UniProt_ID
            title: Plot title
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        subset = matrix.loc[list(proteins)]
        centred = subset.sub(subset.mean(axis=1), axis=0)
        if labels is not None:
            centred.index = [
                f"{labels.get(pid)} ({pid})" if pd.notna(labels.get(pid)) else pid
                for pid in centred.index
            ]

        fig, ax = plt.subplots(figsize=(12, max(4, 0.3 * len(centred))))
        sns.heatmap(centred, cmap='vlag', center=0, ax=ax,
                    cbar_kws={'label': 'log2 abundance - row mean'})
        ax.set_title(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def importance_plot(self, importance: pd.DataFrame, top_n: int = 15,
                        title: str = "Feature Importance (scaled)",
                        save_name: Optional[str] = None) -> plt.Figure:
        """Horizontal bar chart of the top features of an importance table."""
        data = importance.head(top_n)

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.barplot(data=data, x='importance', y='feature', ax=ax, color='steelblue')
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel('Importance', fontsize=12)
        ax.set_ylabel('')
        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def _save_figure(self, fig: plt.Figure, filename: str, dpi: int = 300):
        """
        Save figure to file.

        Args:
            fig: matplotlib Figure object
            filename: Name of the file (without extension)
            dpi: Resolution for saved figure
        """
        self.save_dir.mkdir(parents=True, exist_ok=True)

        if not filename.endswith(('.png', '.pdf', '.svg', '.jpg', '.jpeg')):
            filename += '.png'

        filepath = self.save_dir / filename
        fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
        print(f"Figure saved: {filepath}")

    @staticmethod
    def close_all():
        """Close all figures to free memory."""
        plt.close('all')
