"""
PCA and UMAP embeddings of samples.

Samples are the observations and proteins the features, so the matrix is
transposed before fitting.
"""

import pandas as pd
import numpy as np
from dataclasses import dataclass
from typing import Optional

from sklearn.decomposition import PCA

from ...config.settings import AnalysisConfig
from ...data.schemas import DegenerateInputError


@dataclass
class PCAResult:
    """Container for principal component analysis results."""
    scores: pd.DataFrame
    explained_variance_ratio: pd.Series
    loadings: pd.DataFrame

    def top_loadings(self, component: str = 'PC1', n: int = 10) -> pd.Series:
        """Proteins with the largest absolute loading on ``component``."""
        loadings = self.loadings[component]
        order = loadings.abs().sort_values(ascending=False, kind='mergesort').index[:n]
        return loadings.loc[order]


def _check_matrix(matrix: pd.DataFrame, min_samples: int = 2):
    if matrix.shape[1] < min_samples:
        raise DegenerateInputError(
            f"Need at least {min_samples} samples, got {matrix.shape[1]}"
        )
    if matrix.shape[0] < 1:
        raise DegenerateInputError("Matrix has no proteins")
    if matrix.isna().any().any():
        raise ValueError("Matrix contains missing values")


def run_pca(matrix: pd.DataFrame, n_components: Optional[int] = None) -> PCAResult:
    """
    Principal component analysis with samples as observations.

    Data are centred but not scaled. The full SVD solver is used, so the
    result is identical for identical input ordering.

    Args:
        matrix: Proteins x samples (normalized, filtered)
        n_components: Components to keep. If None, keeps min(samples, proteins).

    Returns:
        PCAResult with scores, variance fractions and loadings
    """
    _check_matrix(matrix)
    X = matrix.T.to_numpy(dtype=float)
    max_components = min(X.shape)
    n_components = min(n_components or max_components, max_components)

    pca = PCA(n_components=n_components, svd_solver='full')
    scores = pca.fit_transform(X)
    names = [f'PC{i + 1}' for i in range(n_components)]

    return PCAResult(
        scores=pd.DataFrame(scores, index=matrix.columns, columns=names),
        explained_variance_ratio=pd.Series(pca.explained_variance_ratio_, index=names),
        loadings=pd.DataFrame(pca.components_.T, index=matrix.index, columns=names),
    )


def run_umap(matrix: pd.DataFrame,
             n_neighbors: int = AnalysisConfig.UMAP_N_NEIGHBORS,
             min_dist: float = AnalysisConfig.UMAP_MIN_DIST,
             random_state: int = AnalysisConfig.RANDOM_SEED,
             n_components: int = 2) -> pd.DataFrame:
    """
    UMAP embedding of samples.

    UMAP is stochastic; results are only reproducible for the same
    ``random_state``, ``n_neighbors`` and ``min_dist``.

    Args:
        matrix: Proteins x samples (normalized, filtered)
        n_neighbors: Size of the local neighbourhood
        min_dist: Minimum distance between embedded points
        random_state: Seed for the embedding
        n_components: Embedding dimensions

    Returns:
        DataFrame of embedding coordinates indexed by sample
    """
    from umap import UMAP

    _check_matrix(matrix)
    if matrix.shape[1] <= n_neighbors:
        raise DegenerateInputError(
            f"UMAP needs more samples ({matrix.shape[1]}) than n_neighbors ({n_neighbors})"
        )

    reducer = UMAP(n_components=n_components, n_neighbors=n_neighbors,
                   min_dist=min_dist, random_state=random_state)
    embedding = reducer.fit_transform(matrix.T.to_numpy(dtype=float))

    return pd.DataFrame(
        embedding, index=matrix.columns,
        columns=[f'UMAP{i + 1}' for i in range(n_components)]
    )
