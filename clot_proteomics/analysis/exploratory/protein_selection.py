"""
Protein selections for heatmaps and summary tables.
"""

import pandas as pd
import numpy as np
from typing import Optional

from ...config.settings import AnalysisConfig


def _gene_lookup(index: pd.Index, annotation: Optional[pd.DataFrame]) -> pd.Series:
    if annotation is None or 'Gene' not in annotation.columns:
        return pd.Series(np.nan, index=index)
    return annotation['Gene'].reindex(index)


def top_abundant_proteins(matrix: pd.DataFrame, annotation: Optional[pd.DataFrame] = None,
                          n: int = AnalysisConfig.TOP_N_PROTEINS) -> pd.DataFrame:
    """
    Proteins that rank among the ``n`` most abundant in more than one sample.

    Within a sample, ties are broken by UniProt_ID so the selection is
    deterministic.

    Args:
        matrix: Proteins x samples
        annotation: Annotation table indexed like ``matrix`` (for gene names)
        n: Proteins selected per sample

    Returns:
        DataFrame with UniProt_ID, Gene and Count, sorted by descending count
        then UniProt_ID
    """
    counts = {}
    for sample in matrix.columns:
        ranked = pd.DataFrame({'UniProt_ID': matrix.index, 'value': matrix[sample].to_numpy()})
        ranked = ranked.sort_values(['value', 'UniProt_ID'], ascending=[False, True],
                                    kind='mergesort')
        for protein in ranked['UniProt_ID'].head(n):
            counts[protein] = counts.get(protein, 0) + 1

    table = pd.DataFrame({'UniProt_ID': list(counts), 'Count': list(counts.values())},
                         columns=['UniProt_ID', 'Count'])
    table = table[table['Count'] > 1]
    table = table.sort_values(['Count', 'UniProt_ID'], ascending=[False, True], kind='mergesort')
    table.insert(1, 'Gene', _gene_lookup(pd.Index(table['UniProt_ID']), annotation).to_numpy())
    return table.reset_index(drop=True)


def highly_variable_proteins(matrix: pd.DataFrame, annotation: Optional[pd.DataFrame] = None,
                             sd_quantile: float = AnalysisConfig.VARIABILITY_QUANTILE,
                             total_quantile: float = AnalysisConfig.ABUNDANCE_QUANTILE) -> pd.DataFrame:
    """
    Proteins that are both highly variable and highly abundant.

    Both cutoffs are empirical quantiles of the matrix passed in, recomputed
    on every call.

    Args:
        matrix: Proteins x samples
        annotation: Annotation table indexed like ``matrix`` (for gene names)
        sd_quantile: Standard deviation quantile a protein must reach
        total_quantile: Total abundance quantile a protein must reach

    Returns:
        DataFrame indexed by UniProt_ID with Gene, SD and Total, sorted by SD
    """
    sd = matrix.std(axis=1, ddof=1)
    total = matrix.sum(axis=1)
    selected = (sd >= sd.quantile(sd_quantile)) & (total >= total.quantile(total_quantile))

    table = pd.DataFrame({
        'Gene': _gene_lookup(matrix.index, annotation),
        'SD': sd,
        'Total': total,
    }).loc[selected]
    table.index.name = 'UniProt_ID'
    return table.sort_values('SD', ascending=False, kind='mergesort')


def detection_summary(abundance: pd.DataFrame) -> pd.DataFrame:
    """
    Proteins detected (> 0) per sample on the raw abundance matrix.

    Returns:
        DataFrame indexed by sample with Detected and Fraction columns
    """
    detected = (abundance > 0).sum(axis=0)
    n_proteins = len(abundance)
    return pd.DataFrame({
        'Detected': detected,
        'Fraction': detected / n_proteins if n_proteins else 0.0,
    })
