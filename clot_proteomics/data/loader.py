"""
Table loading for the clot proteomics analysis.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Sequence, Dict, Union

from ..config.settings import PROTEIN_FILE, SAMPLE_FILE, CLINICAL_FILE, AnalysisConfig
from .schemas import TableSchema, TableLoadError

EXCEL_SUFFIXES = ('.xlsx', '.xls')

PROTEIN_TABLE_SCHEMA = TableSchema(
    'protein', [AnalysisConfig.PROTEIN_NUM_COLUMN, AnalysisConfig.PROTEIN_ID_COLUMN]
)


def load_table(path: Union[str, Path], sep: str = '\t', sheet_name=0,
               required_columns: Optional[Sequence[str]] = None,
               verbose: bool = True) -> pd.DataFrame:
    """
    Read a delimited text file or spreadsheet into a DataFrame.

    There is no partial-success mode: a missing file, a malformed table or a
    missing required column aborts the load.

    Args:
        path: File to read. ``.xlsx``/``.xls`` are read as spreadsheets.
        sep: Delimiter for text files
        sheet_name: Sheet name or index for spreadsheets
        required_columns: Columns that must be present
        verbose: Whether to print the loaded shape

    Returns:
        Loaded DataFrame
    """
    path = Path(path)
    if not path.exists():
        raise TableLoadError(f"Data file not found: {path}")

    try:
        if path.suffix.lower() in EXCEL_SUFFIXES:
            df = pd.read_excel(path, sheet_name=sheet_name)
        else:
            df = pd.read_csv(path, sep=sep, low_memory=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise TableLoadError(f"Error loading {path}: {e}") from e

    if df.shape[1] < 2:
        raise TableLoadError(
            f"Error loading {path}: found {df.shape[1]} column(s), check the delimiter"
        )

    if required_columns:
        TableSchema(path.name, list(required_columns)).validate(df)

    if verbose:
        print(f"Loaded {path.name} with shape: {df.shape}")

    return df


class ProteomicsDataLoader:
    """
    Loader for the three source tables of the clot study.

    The protein table is the combined annotation + abundance export; the
    sample sheet and clinical table are the two metadata spreadsheets.
    """

    def __init__(self, protein_file: Optional[Path] = None,
                 sample_file: Optional[Path] = None,
                 clinical_file: Optional[Path] = None,
                 verbose: bool = True):
        """
        Initialize the data loader.

        Args:
            protein_file: Tab-separated protein table. If None, uses config default.
            sample_file: Sample sheet spreadsheet. If None, uses config default.
            clinical_file: Clinical spreadsheet. If None, uses config default.
            verbose: Whether to print progress
        """
        self.protein_file = Path(protein_file or PROTEIN_FILE)
        self.sample_file = Path(sample_file or SAMPLE_FILE)
        self.clinical_file = Path(clinical_file or CLINICAL_FILE)
        self.verbose = verbose

    def load_protein_table(self) -> pd.DataFrame:
        return load_table(
            self.protein_file, sep='\t',
            required_columns=PROTEIN_TABLE_SCHEMA.required_columns,
            verbose=self.verbose
        )

    def load_sample_table(self) -> pd.DataFrame:
        return load_table(self.sample_file, verbose=self.verbose)

    def load_clinical_table(self) -> pd.DataFrame:
        return load_table(self.clinical_file, verbose=self.verbose)

    def load_all(self) -> Dict[str, pd.DataFrame]:
        """
        Load every source table.

        Returns:
            Dictionary with 'protein', 'sample' and 'clinical' tables
        """
        return {
            'protein': self.load_protein_table(),
            'sample': self.load_sample_table(),
            'clinical': self.load_clinical_table(),
        }
