"""
Configuration module for clot proteomics analysis.
"""

from .settings import AnalysisConfig

__all__ = ['AnalysisConfig']
