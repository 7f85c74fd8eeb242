"""
Clot Proteomics Analysis
========================

Exploratory analysis of thrombus proteomics from mechanical thrombectomy,
assessing whether any clinical variable explains variation in protein
abundance.

Structure:
- data/: Table loading, typed schemas and the persisted dataset bundle
- analysis/preprocessing/: Protein matrix, sample metadata, normalization, filtering
- analysis/exploratory/: PCA/UMAP, metadata correlation, feature importance, selections
- utils/: Statistical helpers and visualization
- config/: Configuration files and constants

Pipeline:
1. Split the protein export into annotation and abundance, keep human proteins
2. Merge sample sheet and clinical metadata on the clot identifier
3. log2 transform and cyclic loess normalization
4. Remove low-abundance proteins
5. Exploratory analytics
"""

__version__ = "1.0.0"
__author__ = "Clot Proteomics Team"
