"""Smoke tests for the plotting layer."""

import pandas as pd
import pytest

from clot_proteomics.analysis.exploratory import run_pca
from clot_proteomics.utils import ProteomicsVisualizer


@pytest.fixture
def visualizer(tmp_path):
    viz = ProteomicsVisualizer(save_dir=tmp_path / 'figures')
    yield viz
    viz.close_all()


def test_pca_plot_is_saved(visualizer, dataset):
    fig = visualizer.pca_plot(run_pca(dataset.abundance), dataset.samples, hue='Sex',
                              save_name='pca')
    assert (visualizer.save_dir / 'pca.png').exists()
    assert '%' in fig.axes[0].get_xlabel()


def test_correlation_matrix_plot(visualizer):
    correlations = pd.DataFrame([[0.9, -0.1], [0.2, 0.5]], index=['Age', 'NIHSS'],
                                columns=['PC1', 'PC2'])
    non_significant = correlations.abs() < 0.4
    visualizer.correlation_matrix_plot(correlations, non_significant, save_name='corr.pdf')
    assert (visualizer.save_dir / 'corr.pdf').exists()


def test_heatmap_and_importance(visualizer, dataset):
    proteins = list(dataset.abundance.index[:5])
    visualizer.abundance_heatmap(dataset.abundance, proteins, labels=dataset.annotation['Gene'],
                                 save_name='heatmap')
    importance = pd.DataFrame({'feature': ['Age', 'NIHSS'], 'importance': [100.0, 40.0]})
    visualizer.importance_plot(importance, save_name='importance')

    assert (visualizer.save_dir / 'heatmap.png').exists()
    assert (visualizer.save_dir / 'importance.png').exists()


def test_nothing_written_without_save_name(visualizer, dataset):
    visualizer.embedding_plot(run_pca(dataset.abundance).scores)
    assert not visualizer.save_dir.exists()
