"""
Low-abundance protein filter.
"""

import pandas as pd
import numpy as np
from typing import Optional, Tuple

from ...config.settings import AnalysisConfig
from ...data.schemas import ProteomicsDataset, SchemaError


class AbundanceFilter:
    """
    Keep proteins with at least ``min_samples`` values above ``threshold``.

    The threshold is given on the linear abundance scale. For a matrix that
    holds exactly ``log2(x + log_offset)`` values, pass ``log_offset`` and the
    threshold is compared as ``log2(threshold + log_offset)``. This does not
    hold after cyclic loess; see :meth:`apply`.
    """

    def __init__(self, threshold: float = AnalysisConfig.ABUNDANCE_THRESHOLD,
                 min_samples: int = AnalysisConfig.MIN_SAMPLES_ABOVE,
                 log_offset: Optional[float] = None,
                 verbose: bool = True):
        if min_samples < 1:
            raise ValueError("min_samples must be at least 1")
        self.threshold = threshold
        self.min_samples = min_samples
        self.log_offset = log_offset
        self.verbose = verbose

    @property
    def effective_threshold(self) -> float:
        if self.log_offset is None:
            return self.threshold
        return float(np.log2(self.threshold + self.log_offset))

    def compute_mask(self, matrix: pd.DataFrame) -> pd.Series:
        """Boolean keep-mask aligned to the matrix rows."""
        support = (matrix > self.effective_threshold).sum(axis=1)
        return support >= self.min_samples

    def filter_matrix(self, matrix: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
        """
        Filter a bare matrix.

        Returns:
            Tuple of (filtered_matrix, n_removed)
        """
        mask = self.compute_mask(matrix)
        return matrix.loc[mask].copy(), int((~mask).sum())

    def apply(self, dataset: ProteomicsDataset,
              reference: Optional[pd.DataFrame] = None) -> Tuple[ProteomicsDataset, int]:
        """
        Filter a dataset, keeping annotation and matrix aligned.

        Cyclic loess shifts every cell, undetected ones included, so a
        loess-normalized matrix no longer carries the detection scale. In
        that case pass the pre-normalization matrix as ``reference``; the
        mask is computed on it and applied to ``dataset``.

        Args:
            dataset: Dataset to filter
            reference: Matrix on the threshold's scale covering every
                protein and sample of ``dataset``. If None, the dataset's
                own abundance matrix is used.

        Returns:
            Tuple of (filtered_dataset, n_removed)
        """
        if reference is None:
            matrix = dataset.abundance
        else:
            index, columns = dataset.abundance.index, dataset.abundance.columns
            if not index.isin(reference.index).all() or not columns.isin(reference.columns).all():
                raise SchemaError("Reference matrix does not cover every protein and sample")
            matrix = reference.loc[index, columns]

        mask = self.compute_mask(matrix)
        n_removed = int((~mask).sum())

        if self.verbose:
            print(f"Abundance filter (>{self.min_samples - 1} samples above "
                  f"{self.effective_threshold:.3f}): removed {n_removed} of "
                  f"{dataset.n_proteins} proteins")

        return dataset.apply_protein_mask(mask, 'abundance_filter'), n_removed
