"""
Utilities module for clot proteomics analysis.

This module provides statistical helpers and the visualization layer used to
report analysis results.
"""

from .visualization import ProteomicsVisualizer
from .statistics import StatisticalAnalyzer, encode_numeric

__all__ = ['ProteomicsVisualizer', 'StatisticalAnalyzer', 'encode_numeric']
