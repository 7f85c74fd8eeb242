"""
Configuration settings for the clot proteomics analysis project.
"""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "output"
FIGURES_DIR = OUTPUT_DIR / "figures"
RESULTS_DIR = OUTPUT_DIR / "results"

# Data file paths
PROTEIN_FILE = DATA_DIR / "proteinGroups.txt"
SAMPLE_FILE = DATA_DIR / "sample_sheet.xlsx"
CLINICAL_FILE = DATA_DIR / "clinical_data.xlsx"
BUNDLE_FILE = RESULTS_DIR / "normalized_bundle.pkl"


# Analysis parameters
class AnalysisConfig:
    """Configuration parameters for analysis."""

    # Protein table conventions
    ABUNDANCE_PREFIX = "LFQ intensity "
    PROTEIN_NUM_COLUMN = "ProteinNum"
    PROTEIN_ID_COLUMN = "Protein IDs"
    ID_ENTRY_DELIMITER = ";"
    ID_FIELD_DELIMITER = "|"
    ORGANISM_SUFFIX = "_HUMAN"

    # Normalization
    LOG_OFFSET = 0.25
    CYCLIC_LOESS_ITERATIONS = 3
    LOESS_SPAN = 0.7
    LOESS_ROBUST_ITERATIONS = 3

    # Abundance filter (linear-scale threshold)
    ABUNDANCE_THRESHOLD = 0.5
    MIN_SAMPLES_ABOVE = 3

    # Exploratory analytics
    N_CORRELATION_COMPONENTS = 5
    SIGNIFICANCE_CUTOFF = 0.1
    TOP_N_PROTEINS = 10
    VARIABILITY_QUANTILE = 0.75
    ABUNDANCE_QUANTILE = 0.5

    UMAP_N_NEIGHBORS = 15
    UMAP_MIN_DIST = 0.1

    CV_FOLDS = 10
    CV_REPEATS = 3
    RF_N_ESTIMATORS = 500

    # Random seed for reproducibility
    RANDOM_SEED = 42


# Sample sheet headers -> canonical names
SAMPLE_COLUMN_MAPPING = {
    'Sample Name': 'Sample_ID',
    'Sample': 'Sample_ID',
    'Clot ID': 'Clot_ID',
    'Clot': 'Clot_ID',
    'Batch': 'Batch',
}

# Clinical spreadsheet headers -> canonical names
CLINICAL_COLUMN_MAPPING = {
    'Clot ID': 'Clot_ID',
    'Study ID': 'Clot_ID',
    'Age': 'Age',
    'Sex': 'Sex',
    'Gender': 'Sex',
    'Mechanism Code': 'Mechanism_Code',
    'TOAST': 'Mechanism_Code',
    'Hypertension': 'Hypertension',
    'Diabetes': 'Diabetes',
    'Hyperlipidemia': 'Hyperlipidemia',
    'Atrial Fibrillation': 'Atrial_Fibrillation',
    'Smoking': 'Smoking',
    'Antiplatelet': 'Antiplatelet',
    'Anticoagulant': 'Anticoagulant',
    'Statin': 'Statin',
    'tPA': 'tPA',
    'NIHSS': 'NIHSS',
    'Glucose': 'Glucose',
    'Platelets': 'Platelets',
    'INR': 'INR',
    'Hematocrit': 'Hematocrit',
    'Onset to Retrieval (min)': 'Onset_to_Retrieval',
}

# Prefixes stripped before the numeric clot identifier is extracted
SAMPLE_KEY_PREFIXES = ['CLOT', 'THROMBUS', 'MT', 'C']

# TOAST stroke mechanism classification
MECHANISM_CODES = {
    1: 'Large artery atherosclerosis',
    2: 'Cardioembolism',
    3: 'Small vessel occlusion',
    4: 'Other determined etiology',
    5: 'Undetermined etiology',
}

BINARY_FLAG_DOMAIN = [0, 1]

# Fixed-domain categorical fields
CATEGORICAL_DOMAINS = {
    'Sex': ['F', 'M'],
    'Mechanism_Code': list(MECHANISM_CODES),
    'Hypertension': BINARY_FLAG_DOMAIN,
    'Diabetes': BINARY_FLAG_DOMAIN,
    'Hyperlipidemia': BINARY_FLAG_DOMAIN,
    'Atrial_Fibrillation': BINARY_FLAG_DOMAIN,
    'Smoking': BINARY_FLAG_DOMAIN,
    'Antiplatelet': BINARY_FLAG_DOMAIN,
    'Anticoagulant': BINARY_FLAG_DOMAIN,
    'Statin': BINARY_FLAG_DOMAIN,
    'tPA': BINARY_FLAG_DOMAIN,
}

NUMERIC_FIELDS = [
    'Age', 'NIHSS', 'Glucose', 'Platelets', 'INR', 'Hematocrit',
    'Onset_to_Retrieval',
]

# Metadata fields correlated against principal components
CORRELATION_FIELDS = [
    'Age', 'Sex', 'Mechanism_Code', 'Hypertension', 'Diabetes',
    'Atrial_Fibrillation', 'Anticoagulant', 'tPA', 'NIHSS', 'Platelets',
    'Onset_to_Retrieval',
]

# Response for the feature importance ranking
RESPONSE_FIELD = 'Mechanism_Code'
