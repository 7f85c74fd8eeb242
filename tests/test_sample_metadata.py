"""Tests for the sample metadata builder."""

import numpy as np
import pandas as pd
import pytest

from clot_proteomics.analysis.preprocessing import SampleMetadataBuilder
from clot_proteomics.data.schemas import SchemaError


@pytest.fixture
def builder():
    return SampleMetadataBuilder(verbose=False)


@pytest.mark.parametrize('raw, expected', [
    ('Clot 1', 1),
    ('CLOT-02', 2),
    ('clot_3', 3),
    ('C4', 4),
    ('MT5', 5),
    ('6', 6),
    (7, 7),
    (8.0, 8),
    ('Thrombus #12', 12),
])
def test_normalize_sample_key(builder, raw, expected):
    assert builder.normalize_sample_key(raw) == expected


@pytest.mark.parametrize('raw', ['Pool QC', 'Control', 'blank', None, np.nan])
def test_non_numeric_keys_are_missing(builder, raw):
    assert np.isnan(builder.normalize_sample_key(raw))


def test_build_joins_on_clot_key(builder, sample_table, clinical_table):
    with pytest.warns(UserWarning, match='no clinical record'):
        samples = builder.build(sample_table, clinical_table)

    assert list(samples.index) == ['S1', 'S2', 'S3', 'S4', 'S5', 'S6']
    assert samples.loc['S2', 'NIHSS'] == 18
    assert builder.join_report['sample_invalid_keys'] == 1
    assert builder.join_report['samples_without_clinical'] == 1
    assert builder.join_report['clinical_without_sample'] == 1


def test_unmatched_sample_keeps_missing_fields(builder, sample_table, clinical_table):
    with pytest.warns(UserWarning):
        samples = builder.build(sample_table, clinical_table)

    assert pd.isna(samples.loc['S6', 'Age'])
    assert pd.isna(samples.loc['S6', 'Sex'])
    assert samples.loc['S6', 'Batch'] == 2


def test_categorical_fields_have_fixed_domains(builder, sample_table, clinical_table):
    with pytest.warns(UserWarning):
        samples = builder.build(sample_table, clinical_table)

    assert list(samples['Sex'].cat.categories) == ['F', 'M']
    assert list(samples['Sex'].iloc[:5]) == ['F', 'M', 'M', 'F', 'F']
    assert list(samples['Mechanism_Code'].cat.categories) == [1, 2, 3, 4, 5]
    assert pd.isna(samples.loc['S4', 'Mechanism_Code'])
    assert list(samples['Hypertension'].iloc[:4]) == [1, 0, 1, 0]
    assert pd.isna(samples.loc['S5', 'Hypertension'])


def test_missing_numeric_values_are_not_zero_filled(builder, sample_table, clinical_table):
    with pytest.warns(UserWarning):
        samples = builder.build(sample_table, clinical_table)

    assert pd.isna(samples.loc['S3', 'Age'])
    assert samples['Age'].dtype == float


def test_out_of_domain_value_is_rejected(builder, sample_table, clinical_table):
    clinical_table.loc[0, 'Sex'] = 'X'
    with pytest.raises(SchemaError, match="'Sex'"):
        builder.build(sample_table, clinical_table)


def test_restrict_to_matrix_samples(builder, sample_table, clinical_table):
    with pytest.warns(UserWarning):
        samples = builder.build(sample_table, clinical_table,
                                sample_ids=['S3', 'S1', 'S2', 'S9'])

    assert list(samples.index) == ['S3', 'S1', 'S2']
    assert builder.join_report['matrix_samples_without_metadata'] == 1
    assert builder.join_report['metadata_samples_without_matrix'] == 3


def test_duplicate_clinical_keys_keep_first(builder, sample_table, clinical_table):
    extra = pd.DataFrame({'Study ID': ['CLOT 1'], 'Age': [99], 'Sex': ['M'],
                          'TOAST': [3], 'Hypertension': [0], 'NIHSS': [1]})
    clinical = pd.concat([clinical_table, extra], ignore_index=True)

    with pytest.warns(UserWarning):
        samples = builder.build(sample_table, clinical)

    assert samples.loc['S1', 'Age'] == 71
    assert builder.join_report['clinical_duplicate_keys'] == 1


def test_missing_required_column(builder, sample_table, clinical_table):
    with pytest.raises(SchemaError, match='Mechanism_Code'):
        builder.build(sample_table, clinical_table.drop(columns=['TOAST']))


def test_ambiguous_headers_are_rejected(builder, sample_table, clinical_table):
    clinical_table['Gender'] = clinical_table['Sex']
    with pytest.raises(SchemaError, match='more than one'):
        builder.build(sample_table, clinical_table)


def test_duplicate_sample_names_are_rejected(builder, sample_table, clinical_table):
    sample_table.loc[1, 'Sample Name'] = 'S1'
    with pytest.raises(SchemaError):
        builder.build(sample_table, clinical_table)
