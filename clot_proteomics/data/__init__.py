"""
Data module for clot proteomics analysis.

This module provides table loading, typed table schemas and the persisted
dataset bundle shared by the preprocessing and exploratory stages.
"""

from .loader import ProteomicsDataLoader, load_table
from .schemas import (
    CategoricalField,
    DegenerateInputError,
    ProteomicsDataset,
    SchemaError,
    TableLoadError,
    TableSchema,
)
from .bundle import save_bundle, load_bundle

__all__ = [
    'ProteomicsDataLoader',
    'load_table',
    'CategoricalField',
    'DegenerateInputError',
    'ProteomicsDataset',
    'SchemaError',
    'TableLoadError',
    'TableSchema',
    'save_bundle',
    'load_bundle',
]
