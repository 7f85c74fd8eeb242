"""Tests for top-abundant and highly-variable protein selections."""

import pandas as pd
import pytest

from clot_proteomics.analysis.exploratory import (
    detection_summary, highly_variable_proteins, top_abundant_proteins
)


@pytest.fixture
def small_matrix():
    return pd.DataFrame(
        {'S1': [10, 9, 1, 2, 3], 'S2': [1, 8, 9, 2, 3], 'S3': [5, 1, 7, 6, 2]},
        index=pd.Index(list('ABCDE'), name='UniProt_ID'),
        dtype=float,
    )


@pytest.fixture
def variable_matrix():
    return pd.DataFrame(
        [[10, 10, 10, 10],
         [0, 20, 0, 20],
         [1, 1, 1, 1],
         [0, 4, 0, 4],
         [5, 15, 5, 15],
         [2, 2, 2, 2],
         [0, 40, 0, 40],
         [0, 2, 0, 2]],
        index=pd.Index([f'P{i + 1}' for i in range(8)], name='UniProt_ID'),
        columns=['S1', 'S2', 'S3', 'S4'],
        dtype=float,
    )


def test_top_abundant_counts_samples(small_matrix):
    table = top_abundant_proteins(small_matrix, n=2)
    assert list(table['UniProt_ID']) == ['B', 'C']
    assert list(table['Count']) == [2, 2]
    assert list(table.columns) == ['UniProt_ID', 'Gene', 'Count']


def test_top_abundant_with_n_above_protein_count(small_matrix):
    table = top_abundant_proteins(small_matrix, n=10)
    assert list(table['UniProt_ID']) == list('ABCDE')
    assert (table['Count'] == 3).all()


def test_top_abundant_ties_broken_by_id():
    matrix = pd.DataFrame({'S1': [5.0, 5.0, 1.0], 'S2': [5.0, 5.0, 1.0]}, index=['Y', 'X', 'Z'])
    table = top_abundant_proteins(matrix, n=1)
    assert list(table['UniProt_ID']) == ['X']


def test_top_abundant_gene_lookup(small_matrix):
    annotation = pd.DataFrame({'Gene': ['GA', 'GB', 'GC', 'GD', 'GE']}, index=small_matrix.index)
    table = top_abundant_proteins(small_matrix, annotation, n=2)
    assert list(table['Gene']) == ['GB', 'GC']


def test_highly_variable_selection(variable_matrix):
    table = highly_variable_proteins(variable_matrix)
    assert list(table.index) == ['P7', 'P2']
    assert table.loc['P2', 'Total'] == 40
    assert table.loc['P7', 'SD'] > table.loc['P2', 'SD']


def test_highly_variable_thresholds_follow_the_matrix(variable_matrix):
    table = highly_variable_proteins(variable_matrix.drop(index='P7'))
    assert list(table.index) == ['P2', 'P5']


def test_detection_summary():
    abundance = pd.DataFrame({'S1': [0.0, 1.0, 2.0, 0.0], 'S2': [3.0, 1.0, 2.0, 4.0]})
    summary = detection_summary(abundance)
    assert summary.loc['S1', 'Detected'] == 2
    assert summary.loc['S2', 'Fraction'] == 1.0
