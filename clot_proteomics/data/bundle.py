"""
Persisted snapshot of the normalised and filtered dataset.

The preprocessing stage writes the bundle once; the exploratory stage reads
it back instead of re-running normalisation.
"""

import pickle
from pathlib import Path
from typing import Optional, Union

from ..config.settings import BUNDLE_FILE
from .schemas import ProteomicsDataset, TableLoadError

BUNDLE_VERSION = 1


def save_bundle(dataset: ProteomicsDataset, path: Optional[Union[str, Path]] = None,
                verbose: bool = True) -> Path:
    """
    Serialize a dataset to disk.

    Args:
        dataset: Dataset to persist
        path: Destination file. If None, uses config default.
        verbose: Whether to print the destination

    Returns:
        Path the bundle was written to
    """
    path = Path(path or BUNDLE_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        'version': BUNDLE_VERSION,
        'annotation': dataset.annotation,
        'abundance': dataset.abundance,
        'samples': dataset.samples,
        'steps': list(dataset.steps),
    }
    with open(path, 'wb') as f:
        pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)

    if verbose:
        print(f"Bundle saved: {path} ({dataset.n_proteins} proteins x {dataset.n_samples} samples)")

    return path


def load_bundle(path: Optional[Union[str, Path]] = None, verbose: bool = True) -> ProteomicsDataset:
    """
    Reload a dataset written by :func:`save_bundle`.

    Args:
        path: Bundle file. If None, uses config default.
        verbose: Whether to print the loaded shape

    Returns:
        ProteomicsDataset with identical values and ordering
    """
    path = Path(path or BUNDLE_FILE)
    if not path.exists():
        raise TableLoadError(f"Bundle not found: {path}. Run the preprocess stage first.")

    try:
        with open(path, 'rb') as f:
            payload = pickle.load(f)
    except (pickle.UnpicklingError, EOFError) as e:
        raise TableLoadError(f"Error loading bundle {path}: {e}") from e

    if not isinstance(payload, dict) or payload.get('version') != BUNDLE_VERSION:
        raise TableLoadError(f"{path} is not a version {BUNDLE_VERSION} bundle")

    dataset = ProteomicsDataset(
        annotation=payload['annotation'],
        abundance=payload['abundance'],
        samples=payload['samples'],
        steps=payload['steps'],
    )

    if verbose:
        print(f"Loaded bundle with {dataset.n_proteins} proteins x {dataset.n_samples} samples")

    return dataset
