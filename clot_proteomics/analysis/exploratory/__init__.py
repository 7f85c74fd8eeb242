"""
Exploratory analytics over the normalized, filtered dataset.

All analyses are read-only: PCA/UMAP embeddings, metadata correlation with
principal components, metadata feature importance and protein selections.
"""

from .dimension_reduction import PCAResult, run_pca, run_umap
from .correlation_analysis import MetadataCorrelationAnalyzer
from .feature_importance import MechanismFeatureImportance, FeatureImportanceResult
from .protein_selection import (
    top_abundant_proteins,
    highly_variable_proteins,
    detection_summary,
)

__all__ = [
    'PCAResult',
    'run_pca',
    'run_umap',
    'MetadataCorrelationAnalyzer',
    'MechanismFeatureImportance',
    'FeatureImportanceResult',
    'top_abundant_proteins',
    'highly_variable_proteins',
    'detection_summary',
]
