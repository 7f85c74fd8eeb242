# tests/conftest.py
import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from clot_proteomics.data.schemas import ProteomicsDataset

PREFIX = 'LFQ intensity '


def make_protein_table(n_proteins=40, n_samples=8, seed=0):
    """Combined annotation + abundance table with a few special rows appended."""
    rng = np.random.default_rng(seed)
    samples = [f'S{i + 1}' for i in range(n_samples)]

    ids = [f'sp|P{10000 + i}|PROT{i}_HUMAN' for i in range(n_proteins)]
    baseline = rng.lognormal(mean=12, sigma=1.5, size=(n_proteins, 1))
    values = baseline * rng.lognormal(mean=0, sigma=0.3, size=(n_proteins, n_samples))

    special_ids = [
        'tr|Q3SX14|FIBB_BOVIN',                    # other organism
        'sp|P10000|PROT0_HUMAN;tr|Q9XXX1|X_MOUSE',  # duplicate of the first row
        'sp|P99998|ZERO_HUMAN',                    # never detected
        'sp|P99999|RARE_HUMAN',                    # detected in one sample
    ]
    special_values = np.vstack([
        rng.lognormal(mean=12, sigma=1, size=n_samples),
        rng.lognormal(mean=12, sigma=1, size=n_samples),
        np.zeros(n_samples),
        np.r_[np.zeros(n_samples - 1), 5000.0],
    ])

    all_ids = ids + special_ids
    all_values = np.vstack([values, special_values])
    table = pd.DataFrame({
        'ProteinNum': np.arange(1, len(all_ids) + 1),
        'Protein IDs': all_ids,
        'Sequence length': rng.integers(100, 2000, size=len(all_ids)),
        'Score': rng.uniform(5, 300, size=len(all_ids)).round(2),
    })
    for j, sample in enumerate(samples):
        table[PREFIX + sample] = all_values[:, j]
    return table


@pytest.fixture
def protein_table():
    return make_protein_table()


@pytest.fixture
def sample_table():
    return pd.DataFrame({
        'Sample Name': ['S1', 'S2', 'S3', 'S4', 'S5', 'S6', 'Pool'],
        'Clot ID': ['Clot 1', 'CLOT-02', 'clot_3', 'C4', 'MT5', '6', 'Pool QC'],
        'Batch': [1, 1, 1, 2, 2, 2, 2],
    })


@pytest.fixture
def clinical_table():
    return pd.DataFrame({
        'Study ID': [1, 2, 3, 4, 5, 7],
        'Age': [71, 64, 'NA', 80, 55, 68],
        'Sex': ['F', 'male', 'M', 'f', 'F', 'M'],
        'TOAST': [1, 2, 2, 'unknown', 5, 3],
        'Hypertension': ['yes', 'no', 1, 0, np.nan, 'Yes'],
        'NIHSS': [12, 18, 7, 22, 4, 15],
    })


@pytest.fixture
def clinical_frames():
    """Protein table, sample sheet and clinical table for 8 matched samples."""
    n_samples = 8
    protein = make_protein_table(n_samples=n_samples)
    sample = pd.DataFrame({
        'Sample Name': [f'S{i + 1}' for i in range(n_samples)],
        'Clot ID': [f'Clot {i + 1}' for i in range(n_samples)],
    })
    clinical = pd.DataFrame({
        'Clot ID': [f'CLOT-{i + 1:03d}' for i in range(n_samples)],
        'Age': [71, 64, 58, 80, 55, 68, 77, 62],
        'Sex': ['F', 'M', 'M', 'F', 'F', 'M', 'F', 'M'],
        'Mechanism Code': [1, 2, 2, 5, 5, 1, 2, 5],
        'Hypertension': ['yes', 'no', 'yes', 'yes', 'no', 'no', 'yes', 'no'],
        'NIHSS': [12, 18, 7, 22, 4, 15, 9, 11],
    })
    return protein, sample, clinical


def make_dataset(n_samples=20, n_proteins=60, seed=1):
    """
    Log-scale dataset whose main axis of variation follows Age.

    Also carries a constant flag (tPA) and a noise field (NIHSS).
    """
    rng = np.random.default_rng(seed)
    samples = [f'S{i + 1}' for i in range(n_samples)]
    proteins = [f'P{i:05d}' for i in range(n_proteins)]

    age = rng.uniform(40, 90, size=n_samples)
    age_z = (age - age.mean()) / age.std()
    loadings = rng.normal(0, 1, size=(n_proteins, 1))
    values = 20 + loadings * age_z[None, :] + rng.normal(0, 0.1, size=(n_proteins, n_samples))

    annotation = pd.DataFrame(
        {'Gene': [f'GENE{i}' for i in range(n_proteins)]},
        index=pd.Index(proteins, name='UniProt_ID')
    )
    abundance = pd.DataFrame(values, index=annotation.index, columns=samples)
    metadata = pd.DataFrame({
        'Age': age,
        'Sex': pd.Categorical(rng.choice(['F', 'M'], size=n_samples), categories=['F', 'M']),
        'tPA': pd.Categorical([0] * n_samples, categories=[0, 1]),
        'NIHSS': rng.integers(0, 30, size=n_samples).astype(float),
    }, index=pd.Index(samples, name='Sample_ID'))

    return ProteomicsDataset(annotation=annotation, abundance=abundance, samples=metadata)


@pytest.fixture
def dataset():
    return make_dataset()
