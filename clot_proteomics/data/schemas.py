"""
Typed table records for the clot proteomics pipeline.

Every table the pipeline touches is described by an explicit schema so that
fields are accessed by name and a reordered source file cannot shift values
into the wrong column.
"""

import pandas as pd
import numpy as np
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Union


class SchemaError(ValueError):
    """Raised when a table does not match its declared schema."""


class TableLoadError(ValueError):
    """Raised when a source table cannot be read."""


class DegenerateInputError(ValueError):
    """Raised when an analysis receives constant or too-small input."""


MISSING_TOKENS = {'', 'na', 'n/a', 'nan', 'none', 'unknown', '-', '?'}
_TRUE_TOKENS = {'yes', 'y', 'true'}
_FALSE_TOKENS = {'no', 'n', 'false'}


@dataclass(frozen=True)
class TableSchema:
    """Required columns of a named source table."""
    name: str
    required_columns: Sequence[str]

    def validate(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in self.required_columns if col not in df.columns]
        if missing:
            raise SchemaError(
                f"{self.name} table is missing required columns: {missing}"
            )
        return df


@dataclass(frozen=True)
class CategoricalField:
    """
    Categorical field with a fixed domain declared up front.

    Values outside the domain are rejected instead of silently becoming new
    levels; missing values stay missing.
    """
    name: str
    domain: Sequence[Any]
    aliases: Dict[str, Any] = field(default_factory=dict)

    @property
    def _integer_domain(self) -> bool:
        return all(isinstance(level, (int, np.integer)) for level in self.domain)

    def canonical_value(self, value: Any) -> Any:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return np.nan

        if isinstance(value, str):
            token = value.strip()
            lowered = token.lower()
            if lowered in MISSING_TOKENS:
                return np.nan
            if lowered in self.aliases:
                return self.aliases[lowered]
            if self._integer_domain:
                if lowered in _TRUE_TOKENS:
                    return 1
                if lowered in _FALSE_TOKENS:
                    return 0
                try:
                    value = float(token)
                except ValueError:
                    return token
            else:
                for level in self.domain:
                    if str(level).lower() == lowered:
                        return level
                return token

        if isinstance(value, (bool, np.bool_)):
            return int(value)
        if self._integer_domain and isinstance(value, (float, np.floating)) and float(value).is_integer():
            return int(value)
        return value

    def coerce(self, series: pd.Series) -> pd.Series:
        """Convert a raw column into a categorical with this field's domain."""
        values = series.map(self.canonical_value)
        observed = values.dropna()
        invalid = sorted({str(v) for v in observed if v not in self.domain})
        if invalid:
            raise SchemaError(
                f"Field '{self.name}' has values outside its domain "
                f"{list(self.domain)}: {invalid}"
            )
        return pd.Series(
            pd.Categorical(values, categories=list(self.domain)),
            index=series.index, name=series.name
        )


@dataclass(frozen=True, eq=False)
class ProteomicsDataset:
    """
    Protein annotation, abundance matrix and sample metadata kept in sync.

    ``annotation`` and ``abundance`` share the same index (UniProt_ID) at
    every stage. Filtering returns a new dataset; nothing is mutated.
    """
    annotation: pd.DataFrame
    abundance: pd.DataFrame
    samples: Optional[pd.DataFrame] = None
    steps: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        if not self.annotation.index.equals(self.abundance.index):
            raise SchemaError("Annotation and abundance rows are not aligned")

    @property
    def n_proteins(self) -> int:
        return len(self.abundance)

    @property
    def n_samples(self) -> int:
        return self.abundance.shape[1]

    def apply_protein_mask(self, mask: Union[pd.Series, np.ndarray],
                           step: str) -> 'ProteomicsDataset':
        """
        Keep the proteins where ``mask`` is True in both annotation and matrix.

        Args:
            mask: Boolean mask, either aligned to the protein index or positional
            step: Name recorded in the step report

        Returns:
            New ProteomicsDataset with the step appended to ``steps``
        """
        if isinstance(mask, pd.Series):
            mask = mask.reindex(self.abundance.index)
            if mask.isna().any():
                raise SchemaError(f"Mask for step '{step}' does not cover every protein")
            mask = mask.to_numpy(dtype=bool)
        else:
            mask = np.asarray(mask, dtype=bool)
            if mask.shape != (self.n_proteins,):
                raise SchemaError(
                    f"Mask for step '{step}' has {mask.shape[0]} entries, "
                    f"expected {self.n_proteins}"
                )

        kept = int(mask.sum())
        report = {'step': step, 'removed': self.n_proteins - kept, 'remaining': kept}
        return replace(
            self,
            annotation=self.annotation.loc[mask].copy(),
            abundance=self.abundance.loc[mask].copy(),
            steps=self.steps + [report],
        )

    def with_abundance(self, abundance: pd.DataFrame, step: str) -> 'ProteomicsDataset':
        """Replace the matrix values (same rows) and record the transformation."""
        report = {'step': step, 'removed': 0, 'remaining': len(abundance)}
        return replace(self, abundance=abundance, steps=self.steps + [report])

    def with_samples(self, samples: pd.DataFrame) -> 'ProteomicsDataset':
        """
        Attach sample metadata and restrict the matrix to those samples.

        Matrix columns are reordered to follow ``samples.index``; matrix
        samples without metadata are dropped and reported in ``steps``.
        """
        missing = [s for s in samples.index if s not in self.abundance.columns]
        if missing:
            raise SchemaError(f"Samples without an abundance column: {missing}")

        dropped = self.abundance.shape[1] - len(samples)
        report = {'step': 'align_samples', 'removed_samples': dropped,
                  'remaining_samples': len(samples)}
        return replace(
            self,
            abundance=self.abundance.loc[:, list(samples.index)].copy(),
            samples=samples,
            steps=self.steps + [report],
        )
