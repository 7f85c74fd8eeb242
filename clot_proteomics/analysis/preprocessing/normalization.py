"""
Log transformation and cyclic loess between-sample normalization.
"""

import pandas as pd
import numpy as np
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Any

from statsmodels.nonparametric.smoothers_lowess import lowess

from ...config.settings import AnalysisConfig
from ...data.schemas import ProteomicsDataset


@dataclass
class NormalizationResult:
    """Container for a normalized matrix and the rows removed beforehand."""
    matrix: pd.DataFrame
    kept_mask: pd.Series
    n_removed: int


class Normalizer:
    """
    Cyclic loess normalizer for abundance matrices.

    Steps, in order:
    1. Drop proteins whose abundance is zero in every sample
    2. ``log2(x + offset)``
    3. For a fixed number of cycles, visit every sample pair (j, k), fit a
       lowess curve of M = x_j - x_k against A = (x_j + x_k) / 2 and move
       half of the fitted difference out of each sample

    The iteration count is fixed, so the procedure always terminates and is
    deterministic for a given input and parameter set.
    """

    def __init__(self, offset: float = AnalysisConfig.LOG_OFFSET,
                 iterations: int = AnalysisConfig.CYCLIC_LOESS_ITERATIONS,
                 span: float = AnalysisConfig.LOESS_SPAN,
                 robust_iterations: int = AnalysisConfig.LOESS_ROBUST_ITERATIONS,
                 verbose: bool = True):
        if offset <= 0:
            raise ValueError("offset must be positive")
        if iterations < 1:
            raise ValueError("iterations must be at least 1")
        if not 0 < span <= 1:
            raise ValueError("span must be in (0, 1]")
        self.offset = offset
        self.iterations = iterations
        self.span = span
        self.robust_iterations = robust_iterations
        self.verbose = verbose

    def remove_zero_rows(self, abundance: pd.DataFrame) -> pd.Series:
        """Mask of proteins detected in at least one sample."""
        return abundance.sum(axis=1) != 0

    def log_transform(self, abundance: pd.DataFrame) -> pd.DataFrame:
        return np.log2(abundance + self.offset)

    def cyclic_loess(self, log_matrix: pd.DataFrame) -> pd.DataFrame:
        """
        Pairwise cyclic loess on a log-scale matrix.

        Args:
            log_matrix: Proteins x samples, log2 scale, no missing values

        Returns:
            Normalized matrix with the same index and columns
        """
        x = log_matrix.to_numpy(dtype=float, copy=True)
        n_rows, n_samples = x.shape
        if n_samples < 2 or n_rows < 3:
            return log_matrix.copy()

        for _ in range(self.iterations):
            for j, k in combinations(range(n_samples), 2):
                m = x[:, j] - x[:, k]
                a = (x[:, j] + x[:, k]) / 2
                delta = 0.01 * (a.max() - a.min())
                fit = lowess(m, a, frac=self.span, it=self.robust_iterations,
                             delta=delta, return_sorted=False)
                fit = np.nan_to_num(fit, nan=0.0)
                x[:, j] -= fit / 2
                x[:, k] += fit / 2

        return pd.DataFrame(x, index=log_matrix.index, columns=log_matrix.columns)

    def normalize(self, abundance: pd.DataFrame) -> NormalizationResult:
        """
        Run zero-row removal, log transformation and cyclic loess.

        Args:
            abundance: Non-negative abundance matrix (proteins x samples)

        Returns:
            NormalizationResult with the normalized matrix
        """
        if abundance.isna().any().any():
            raise ValueError("Abundance matrix contains missing values")
        if (abundance < 0).any().any():
            raise ValueError("Abundance matrix contains negative values")

        kept_mask = self.remove_zero_rows(abundance)
        n_removed = int((~kept_mask).sum())

        if self.verbose:
            print(f"Normalizing {len(abundance)} proteins x {abundance.shape[1]} samples...")
            print(f"   Removed {n_removed} proteins with zero abundance in all samples")

        log_matrix = self.log_transform(abundance.loc[kept_mask])
        normalized = self.cyclic_loess(log_matrix)

        if self.verbose:
            print(f"   Cyclic loess: {self.iterations} cycles, span={self.span}")

        return NormalizationResult(matrix=normalized, kept_mask=kept_mask, n_removed=n_removed)

    def normalize_dataset(self, dataset: ProteomicsDataset) -> ProteomicsDataset:
        """Normalize a dataset's matrix, removing zero rows from its annotation too."""
        result = self.normalize(dataset.abundance)
        filtered = dataset.apply_protein_mask(result.kept_mask, 'remove_zero_abundance')
        return filtered.with_abundance(result.matrix, 'log2_cyclic_loess')


def median_spread(matrix: pd.DataFrame) -> Dict[str, Any]:
    """
    Spread of per-sample medians, used to check normalization effectiveness.

    Returns:
        Dictionary with per-sample medians and their variance
    """
    medians = matrix.median(axis=0)
    return {
        'sample_medians': medians,
        'variance_of_medians': float(medians.var(ddof=0)),
        'range_of_medians': float(medians.max() - medians.min()),
    }
