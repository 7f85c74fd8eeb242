"""
Statistical utilities for clot proteomics analysis.
"""

import numpy as np
import pandas as pd
from scipy import stats
from typing import Dict, Any, List, Optional, Sequence, Tuple

from ..config.settings import AnalysisConfig
from ..data.schemas import DegenerateInputError


def encode_numeric(data: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Numeric view of metadata columns.

    Categorical columns are replaced by their integer codes with missing
    values kept as NaN; everything else goes through ``pd.to_numeric``.
    """
    columns = list(columns) if columns is not None else list(data.columns)
    encoded = pd.DataFrame(index=data.index)
    for col in columns:
        series = data[col]
        if isinstance(series.dtype, pd.CategoricalDtype):
            codes = series.cat.codes.astype(float)
            encoded[col] = codes.where(codes >= 0, np.nan)
        elif series.dtype == bool:
            encoded[col] = series.astype(float)
        else:
            encoded[col] = pd.to_numeric(series, errors='coerce').astype(float)
    return encoded


class StatisticalAnalyzer:
    """
    Statistical analysis utilities for proteomics metadata.

    Provides rank correlation with significance testing and the checks that
    keep constant inputs out of those computations.
    """

    def __init__(self, alpha: float = AnalysisConfig.SIGNIFICANCE_CUTOFF):
        """
        Initialize the statistical analyzer.

        Args:
            alpha: p-value at or above which a correlation is non-significant
        """
        self.alpha = alpha

    def split_degenerate(self, data: pd.DataFrame,
                         min_levels: int = 2) -> Tuple[List[str], List[str]]:
        """
        Separate columns with real variation from constant or empty ones.

        Returns:
            Tuple of (usable_columns, excluded_columns)
        """
        usable, excluded = [], []
        for col in data.columns:
            if data[col].dropna().nunique() >= min_levels:
                usable.append(col)
            else:
                excluded.append(col)
        return usable, excluded

    def spearman_matrix(self, x: pd.DataFrame, y: pd.DataFrame,
                        min_observations: int = 3) -> Dict[str, Any]:
        """
        Spearman correlation of every column of ``x`` with every column of ``y``.

        Pairs are evaluated on complete observations only.

        Args:
            x: Numeric DataFrame (rows = observations)
            y: Numeric DataFrame with the same index as ``x``
            min_observations: Minimum complete pairs for a test

        Returns:
            Dictionary with 'correlations', 'p_values' and 'n_observations'
            DataFrames (rows = x columns, columns = y columns)
        """
        if not x.index.equals(y.index):
            raise ValueError("Correlation inputs must share the same index")

        corr = pd.DataFrame(np.nan, index=x.columns, columns=y.columns)
        p_values = corr.copy()
        n_obs = pd.DataFrame(0, index=x.columns, columns=y.columns)

        for x_col in x.columns:
            for y_col in y.columns:
                pair = pd.concat([x[x_col], y[y_col]], axis=1).dropna()
                n_obs.loc[x_col, y_col] = len(pair)
                if len(pair) < min_observations:
                    continue
                if pair.iloc[:, 0].nunique() < 2 or pair.iloc[:, 1].nunique() < 2:
                    raise DegenerateInputError(
                        f"'{x_col}' or '{y_col}' is constant over the complete observations"
                    )
                rho, p_value = stats.spearmanr(pair.iloc[:, 0], pair.iloc[:, 1])
                corr.loc[x_col, y_col] = rho
                p_values.loc[x_col, y_col] = p_value

        return {
            'correlations': corr,
            'p_values': p_values,
            'n_observations': n_obs,
        }

    def non_significant(self, p_values: pd.DataFrame) -> pd.DataFrame:
        """Mask of pairs with p >= alpha (or untestable)."""
        return ~(p_values < self.alpha)
