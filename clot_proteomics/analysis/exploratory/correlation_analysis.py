"""
Correlation of sample metadata with principal components.

This module tests whether any clinical variable tracks the main axes of
variation in protein abundance.
"""

import warnings
import pandas as pd
from typing import Dict, Any, List, Optional, Sequence

from ...utils.statistics import StatisticalAnalyzer, encode_numeric
from ...config.settings import AnalysisConfig, CORRELATION_FIELDS
from ...data.schemas import DegenerateInputError, ProteomicsDataset
from .dimension_reduction import PCAResult, run_pca


class MetadataCorrelationAnalyzer:
    """
    Analyzer for metadata versus principal component score correlations.

    Spearman rank correlation is computed between each metadata field
    (categoricals coded as integers) and each of the leading principal
    component scores, with a p-value per pair.
    """

    def __init__(self, fields: Optional[Sequence[str]] = None,
                 n_components: int = AnalysisConfig.N_CORRELATION_COMPONENTS,
                 alpha: float = AnalysisConfig.SIGNIFICANCE_CUTOFF,
                 verbose: bool = True):
        """
        Initialize the analyzer.

        Args:
            fields: Metadata fields to correlate. If None, uses config default.
            n_components: Number of leading components to correlate against
            alpha: Pairs with p >= alpha are flagged non-significant
            verbose: Whether to print a summary
        """
        self.fields = list(fields or CORRELATION_FIELDS)
        self.n_components = n_components
        self.stats_analyzer = StatisticalAnalyzer(alpha=alpha)
        self.verbose = verbose
        self.results = {}

    def analyze_correlations(self, dataset: ProteomicsDataset,
                             pca_result: Optional[PCAResult] = None) -> Dict[str, Any]:
        """
        Correlate metadata fields with the top principal component scores.

        Args:
            dataset: Normalized, filtered dataset with sample metadata
            pca_result: Precomputed PCA. If None, PCA is run on the dataset.

        Returns:
            Dictionary with correlation and p-value matrices
        """
        if dataset.samples is None:
            raise ValueError("Dataset has no sample metadata")

        if pca_result is None:
            pca_result = run_pca(dataset.abundance)

        components = list(pca_result.scores.columns[:self.n_components])
        scores = pca_result.scores.loc[dataset.samples.index, components]

        available = [f for f in self.fields if f in dataset.samples.columns]
        missing = [f for f in self.fields if f not in dataset.samples.columns]
        if missing:
            warnings.warn(f"Metadata fields not found and skipped: {missing}")

        metadata = encode_numeric(dataset.samples, available)
        usable, excluded = self.stats_analyzer.split_degenerate(metadata)
        if excluded:
            warnings.warn(f"Excluded fields without variation: {excluded}")
        if not usable:
            raise DegenerateInputError("No metadata field has more than one observed level")

        correlation_results = self.stats_analyzer.spearman_matrix(metadata[usable], scores)
        p_values = correlation_results['p_values']

        self.results['correlation_analysis'] = {
            'sample_size': len(scores),
            'correlations': correlation_results['correlations'],
            'p_values': p_values,
            'n_observations': correlation_results['n_observations'],
            'non_significant': self.stats_analyzer.non_significant(p_values),
            'fields_analyzed': usable,
            'fields_excluded': excluded + missing,
            'components': components,
            'explained_variance_ratio': pca_result.explained_variance_ratio.loc[components],
        }

        if self.verbose:
            print(f"Correlated {len(usable)} metadata fields with {len(components)} components "
                  f"({len(scores)} samples)")
            significant = self.significant_pairs()
            print(f"   Pairs with p < {self.stats_analyzer.alpha}: {len(significant)}")

        return self.results['correlation_analysis']

    def significant_pairs(self) -> List[Dict[str, Any]]:
        """Field/component pairs below the significance cutoff, strongest first."""
        if 'correlation_analysis' not in self.results:
            raise ValueError("Run analyze_correlations first")

        result = self.results['correlation_analysis']
        pairs = []
        for field_name in result['correlations'].index:
            for component in result['correlations'].columns:
                if not result['non_significant'].loc[field_name, component]:
                    pairs.append({
                        'field': field_name,
                        'component': component,
                        'rho': result['correlations'].loc[field_name, component],
                        'p_value': result['p_values'].loc[field_name, component],
                    })
        return sorted(pairs, key=lambda pair: pair['p_value'])
