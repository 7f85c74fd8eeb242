"""
Analysis module for clot proteomics.

- preprocessing/: protein matrix, sample metadata, normalization, filtering
- exploratory/: dimension reduction, correlation, feature importance, selections
"""
