"""
Sample metadata construction.

Merges the proteomics sample sheet with the clinical spreadsheet on a
normalized clot key and coerces the declared fields to their types.
"""

import re
import warnings
import pandas as pd
import numpy as np
from typing import Dict, List, Optional, Sequence, Any

from ...config.settings import (
    SAMPLE_COLUMN_MAPPING, CLINICAL_COLUMN_MAPPING, SAMPLE_KEY_PREFIXES,
    CATEGORICAL_DOMAINS, NUMERIC_FIELDS
)
from ...data.schemas import CategoricalField, SchemaError, TableSchema

SAMPLE_SCHEMA = TableSchema('sample sheet', ['Sample_ID', 'Clot_ID'])
CLINICAL_SCHEMA = TableSchema('clinical', ['Clot_ID', 'Mechanism_Code'])

SEX_ALIASES = {'female': 'F', 'woman': 'F', 'male': 'M', 'man': 'M'}

_LEADING_NUMBER = re.compile(r'^[\s_\-#.:]*(\d+)')


class SampleMetadataBuilder:
    """
    Builder for the per-sample metadata table.

    The sample sheet is the abundance-bearing side: it is left-joined with the
    clinical table, so a sample without clinical data keeps missing clinical
    fields rather than disappearing. Restricting to the abundance matrix
    samples is an inner join.
    """

    def __init__(self, sample_mapping: Optional[Dict[str, str]] = None,
                 clinical_mapping: Optional[Dict[str, str]] = None,
                 key_prefixes: Optional[Sequence[str]] = None,
                 categorical_domains: Optional[Dict[str, List[Any]]] = None,
                 numeric_fields: Optional[Sequence[str]] = None,
                 verbose: bool = True):
        self.sample_mapping = sample_mapping or SAMPLE_COLUMN_MAPPING
        self.clinical_mapping = clinical_mapping or CLINICAL_COLUMN_MAPPING
        self.key_prefixes = sorted(
            [p.upper() for p in (key_prefixes or SAMPLE_KEY_PREFIXES)], key=len, reverse=True
        )
        domains = categorical_domains or CATEGORICAL_DOMAINS
        self.categorical_fields = {
            name: CategoricalField(name, domain, SEX_ALIASES if name == 'Sex' else {})
            for name, domain in domains.items()
        }
        self.numeric_fields = list(numeric_fields or NUMERIC_FIELDS)
        self.verbose = verbose
        self.join_report = {}

    def rename_columns(self, table: pd.DataFrame, mapping: Dict[str, str],
                       schema: TableSchema) -> pd.DataFrame:
        """Rename source headers to canonical field names and validate."""
        canonical_names = set(mapping.values())
        renames = {}
        for col in table.columns:
            header = str(col).strip()
            canonical = mapping.get(header, header if header in canonical_names else None)
            if canonical is None:
                continue
            if canonical in renames.values():
                raise SchemaError(
                    f"{schema.name} table has more than one column for '{canonical}'"
                )
            renames[col] = canonical

        return schema.validate(table.rename(columns=renames))

    def normalize_sample_key(self, value: Any) -> float:
        """
        Derive the numeric clot key from a raw identifier.

        Known prefixes are stripped and the leading integer is extracted;
        identifiers without one (pools, controls) yield NaN and are removed.
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return np.nan

        text = str(value).strip().upper()
        for prefix in self.key_prefixes:
            if text.startswith(prefix):
                text = text[len(prefix):]
                break

        match = _LEADING_NUMBER.match(text)
        return float(match.group(1)) if match else np.nan

    def _add_keys(self, table: pd.DataFrame, label: str) -> pd.DataFrame:
        table = table.copy()
        table['Clot_Key'] = table['Clot_ID'].map(self.normalize_sample_key)
        invalid = table['Clot_Key'].isna()
        self.join_report[f'{label}_invalid_keys'] = int(invalid.sum())
        if self.verbose and invalid.any():
            print(f"   Removed {int(invalid.sum())} {label} rows without a numeric clot key")
        table = table.loc[~invalid].copy()
        table['Clot_Key'] = table['Clot_Key'].astype(int)
        return table

    def coerce_types(self, df: pd.DataFrame) -> pd.DataFrame:
        """Coerce declared categorical and numeric fields; others are left as-is."""
        df = df.copy()
        for name, categorical in self.categorical_fields.items():
            if name in df.columns:
                df[name] = categorical.coerce(df[name])
        for name in self.numeric_fields:
            if name in df.columns:
                df[name] = pd.to_numeric(df[name], errors='coerce').astype(float)
        return df

    def build(self, sample_table: pd.DataFrame, clinical_table: pd.DataFrame,
              sample_ids: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """
        Merge both metadata tables into one record per sample.

        Args:
            sample_table: Proteomics sample sheet (Sample_ID -> Clot_ID)
            clinical_table: Clinical spreadsheet keyed by Clot_ID
            sample_ids: Abundance matrix sample names. If given, the result
                holds exactly the samples present in both, in this order.

        Returns:
            DataFrame indexed by Sample_ID
        """
        if self.verbose:
            print("Building sample metadata...")

        self.join_report = {}
        samples = self.rename_columns(sample_table, self.sample_mapping, SAMPLE_SCHEMA)
        clinical = self.rename_columns(clinical_table, self.clinical_mapping, CLINICAL_SCHEMA)

        samples['Sample_ID'] = samples['Sample_ID'].astype(str).str.strip()
        if samples['Sample_ID'].duplicated().any():
            duplicates = samples.loc[samples['Sample_ID'].duplicated(), 'Sample_ID'].tolist()
            raise SchemaError(f"Sample sheet lists samples more than once: {duplicates}")

        samples = self._add_keys(samples, 'sample')
        clinical = self._add_keys(clinical, 'clinical')

        duplicated = clinical['Clot_Key'].duplicated(keep='first')
        self.join_report['clinical_duplicate_keys'] = int(duplicated.sum())
        clinical = clinical.loc[~duplicated].drop(columns=['Clot_ID'])

        merged = samples.merge(
            clinical, on='Clot_Key', how='left', indicator=True,
            suffixes=('', '_clinical'), validate='many_to_one'
        )
        unmatched = merged['_merge'] == 'left_only'
        self.join_report['samples_without_clinical'] = int(unmatched.sum())
        self.join_report['clinical_without_sample'] = int(
            (~clinical['Clot_Key'].isin(samples['Clot_Key'])).sum()
        )
        if unmatched.any():
            warnings.warn(
                f"{int(unmatched.sum())} samples have no clinical record: "
                f"{merged.loc[unmatched, 'Sample_ID'].tolist()}"
            )
        merged = merged.drop(columns=['_merge']).set_index('Sample_ID')

        if sample_ids is not None:
            sample_ids = [str(s).strip() for s in sample_ids]
            in_matrix = [s for s in sample_ids if s in merged.index]
            self.join_report['matrix_samples_without_metadata'] = len(sample_ids) - len(in_matrix)
            self.join_report['metadata_samples_without_matrix'] = int(
                (~merged.index.isin(sample_ids)).sum()
            )
            merged = merged.loc[in_matrix]

        merged = self.coerce_types(merged)
        self.join_report['samples'] = len(merged)

        if self.verbose:
            for key, value in self.join_report.items():
                print(f"   {key}: {value}")

        return merged
