"""
Preprocessing: protein matrix, sample metadata, normalization and filtering.

Stages run strictly in order; each returns a new dataset derived from the
previous one.
"""

from .protein_matrix import ProteinMatrixBuilder, synchronize_matrix
from .sample_metadata import SampleMetadataBuilder
from .normalization import Normalizer, NormalizationResult, median_spread
from .filtering import AbundanceFilter

__all__ = [
    'ProteinMatrixBuilder',
    'synchronize_matrix',
    'SampleMetadataBuilder',
    'Normalizer',
    'NormalizationResult',
    'median_spread',
    'AbundanceFilter',
]
