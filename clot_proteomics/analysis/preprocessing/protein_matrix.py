"""
Protein annotation and abundance matrix construction.

The protein export combines annotation columns and one abundance column per
sample. This module splits the two, resolves the composite protein identifier
to a single human UniProt accession per row and keeps the matrix rows in step
with the retained annotation.
"""

import pandas as pd
import numpy as np
import warnings
from typing import Dict, List, Tuple, Any, Optional

from ...config.settings import AnalysisConfig
from ...data.schemas import ProteomicsDataset, SchemaError
from ...data.loader import PROTEIN_TABLE_SCHEMA


def synchronize_matrix(annotation: pd.DataFrame, abundance: pd.DataFrame,
                       key: str = AnalysisConfig.PROTEIN_NUM_COLUMN,
                       verbose: bool = True) -> Tuple[pd.DataFrame, int]:
    """
    Reindex an abundance matrix to exactly the proteins kept in ``annotation``.

    Args:
        annotation: Retained annotation, indexed by UniProt_ID
        abundance: Matrix indexed by the values of ``annotation[key]``
        key: Annotation column identifying matrix rows
        verbose: Whether to print the number of dropped rows

    Returns:
        Tuple of (matrix indexed like ``annotation``, rows dropped)
    """
    keys = annotation[key]
    missing = keys[~keys.isin(abundance.index)]
    if len(missing) > 0:
        raise SchemaError(
            f"{len(missing)} retained proteins have no abundance row, "
            f"e.g. {key}={missing.iloc[0]}"
        )

    n_dropped = int((~abundance.index.isin(keys)).sum())
    synced = abundance.loc[keys.to_numpy()].copy()
    synced.index = annotation.index

    if verbose and n_dropped > 0:
        print(f"Dropped {n_dropped} abundance rows without retained annotation")

    return synced, n_dropped


class ProteinMatrixBuilder:
    """
    Builder for the protein annotation table and abundance matrix.

    Only entries of the organism of interest (``_HUMAN`` suffix) are used to
    name a protein group; the first such entry wins, and when several groups
    resolve to the same accession the first group wins. Both rules are
    heuristics kept exactly as documented, including for cross-species
    homologs.
    """

    def __init__(self, abundance_prefix: str = AnalysisConfig.ABUNDANCE_PREFIX,
                 id_column: str = AnalysisConfig.PROTEIN_ID_COLUMN,
                 key_column: str = AnalysisConfig.PROTEIN_NUM_COLUMN,
                 entry_delimiter: str = AnalysisConfig.ID_ENTRY_DELIMITER,
                 field_delimiter: str = AnalysisConfig.ID_FIELD_DELIMITER,
                 organism_suffix: str = AnalysisConfig.ORGANISM_SUFFIX,
                 verbose: bool = True):
        self.abundance_prefix = abundance_prefix
        self.id_column = id_column
        self.key_column = key_column
        self.entry_delimiter = entry_delimiter
        self.field_delimiter = field_delimiter
        self.organism_suffix = organism_suffix
        self.verbose = verbose
        self.report = {}

    def split_columns(self, table: pd.DataFrame) -> Tuple[List[str], List[str]]:
        """
        Split column names into annotation and abundance columns.

        Returns:
            Tuple of (annotation_columns, abundance_columns)
        """
        PROTEIN_TABLE_SCHEMA.validate(table)

        abundance_cols = [col for col in table.columns
                          if str(col).startswith(self.abundance_prefix)]
        annotation_cols = [col for col in table.columns if col not in abundance_cols]

        if not abundance_cols:
            raise SchemaError(
                f"No abundance columns with prefix '{self.abundance_prefix}' found"
            )

        return annotation_cols, abundance_cols

    def parse_protein_ids(self, raw: Any) -> List[Tuple[str, str, str]]:
        """
        Parse a composite identifier into (namespace, accession, gene) triplets.

        Only entries carrying the organism suffix are returned, in their
        original order.
        """
        if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
            return []

        triplets = []
        for entry in str(raw).split(self.entry_delimiter):
            entry = entry.strip()
            if not entry.endswith(self.organism_suffix):
                continue
            parts = entry.split(self.field_delimiter)
            if len(parts) < 3:
                continue
            namespace, accession, symbol = parts[0], parts[1], parts[2]
            gene = symbol[:-len(self.organism_suffix)] if symbol.endswith(self.organism_suffix) else symbol
            triplets.append((namespace, accession, gene))

        return triplets

    def extract_abundance(self, table: pd.DataFrame, abundance_cols: List[str]) -> pd.DataFrame:
        """Numeric abundance matrix indexed by the protein key, prefix stripped."""
        abundance = table[abundance_cols].copy()
        try:
            abundance = abundance.apply(pd.to_numeric)
        except (ValueError, TypeError) as e:
            raise SchemaError(f"Non-numeric abundance values: {e}") from e

        n_missing = int(abundance.isna().sum().sum())
        if n_missing > 0:
            # exports leave undetected intensities empty
            abundance = abundance.fillna(0.0)
            if self.verbose:
                print(f"Treated {n_missing} empty abundance cells as not detected (0)")

        if (abundance < 0).any().any():
            raise SchemaError("Abundance values must be non-negative")

        abundance.columns = [col[len(self.abundance_prefix):].strip() for col in abundance_cols]
        abundance.columns.name = 'Sample'
        abundance.index = table[self.key_column].to_numpy()
        return abundance.astype(float)

    def build(self, table: pd.DataFrame) -> ProteomicsDataset:
        """
        Build the synchronized annotation table and abundance matrix.

        Args:
            table: Combined annotation + abundance table

        Returns:
            ProteomicsDataset indexed by UniProt_ID
        """
        if self.verbose:
            print("Building protein annotation and abundance matrix...")

        annotation_cols, abundance_cols = self.split_columns(table)

        if table[self.key_column].duplicated().any():
            raise SchemaError(f"Column '{self.key_column}' contains duplicate keys")

        abundance = self.extract_abundance(table, abundance_cols)

        total = len(table)
        parsed = table[self.id_column].map(self.parse_protein_ids)
        organism_mask = parsed.map(len) > 0

        annotation = table.loc[organism_mask, annotation_cols].copy()
        first_entries = parsed[organism_mask]
        annotation['UniProt_ID'] = [entries[0][1] for entries in first_entries]
        annotation['Gene'] = [entries[0][2] for entries in first_entries]
        n_other_organism = total - len(annotation)

        duplicated = annotation['UniProt_ID'].duplicated(keep='first')
        n_duplicates = int(duplicated.sum())
        annotation = annotation.loc[~duplicated].set_index('UniProt_ID')

        if len(annotation) == 0:
            warnings.warn(
                f"No protein IDs end with '{self.organism_suffix}'; "
                "the retained protein set is empty"
            )

        abundance, n_unmatched = synchronize_matrix(
            annotation, abundance, key=self.key_column, verbose=self.verbose
        )

        discarded = total - len(annotation)
        self.report = {
            'total_proteins': total,
            'other_organism_removed': n_other_organism,
            'duplicates_removed': n_duplicates,
            'retained': len(annotation),
            'fraction_discarded': discarded / total if total else 0.0,
            'unmatched_matrix_rows': n_unmatched,
        }

        if self.verbose:
            print(f"   Protein groups: {total}")
            print(f"   Removed (no {self.organism_suffix} entry): {n_other_organism}")
            print(f"   Removed (duplicate UniProt_ID): {n_duplicates}")
            print(f"   Retained: {len(annotation)} "
                  f"({100 * self.report['fraction_discarded']:.1f}% discarded)")

        steps = [
            {'step': 'organism_filter', 'removed': n_other_organism,
             'remaining': total - n_other_organism},
            {'step': 'deduplicate_uniprot_id', 'removed': n_duplicates,
             'remaining': len(annotation)},
        ]
        return ProteomicsDataset(annotation=annotation, abundance=abundance, steps=steps)
