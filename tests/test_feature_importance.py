"""Tests for the random forest importance ranking of metadata fields."""

import numpy as np
import pandas as pd
import pytest

from clot_proteomics.analysis.exploratory import MechanismFeatureImportance
from clot_proteomics.analysis.exploratory.feature_importance import scale_importance
from clot_proteomics.data.schemas import DegenerateInputError


def _samples(n=40, seed=3):
    rng = np.random.default_rng(seed)
    mechanism = np.repeat([1, 5], n // 2)
    return pd.DataFrame({
        'Clot_ID': np.arange(1, n + 1),
        'Mechanism_Code': pd.Categorical(mechanism, categories=[1, 2, 3, 4, 5]),
        'Atrial_Fibrillation': pd.Categorical((mechanism == 5).astype(int), categories=[0, 1]),
        'Age': rng.uniform(40, 90, size=n),
        'NIHSS': rng.integers(0, 30, size=n).astype(float),
        'tPA': pd.Categorical([0] * n, categories=[0, 1]),
    }, index=pd.Index([f'S{i + 1}' for i in range(n)], name='Sample_ID'))


@pytest.fixture
def ranker():
    return MechanismFeatureImportance(n_estimators=50, verbose=False)


def test_informative_field_ranks_first(ranker):
    with pytest.warns(UserWarning, match='tPA'):
        result = ranker.fit(_samples())

    top = result.importance.iloc[0]
    assert top['feature'] == 'Atrial_Fibrillation'
    assert top['importance'] == pytest.approx(100.0)
    assert result.importance['importance'].max() == pytest.approx(100.0)
    assert result.mean_accuracy > 0.8
    assert len(result.cv_accuracy) == 30
    assert result.classes == ['1', '5']


def test_identifiers_and_constant_fields_are_not_predictors(ranker):
    with pytest.warns(UserWarning):
        result = ranker.fit(_samples())

    assert set(result.importance['feature']) == {'Atrial_Fibrillation', 'Age', 'NIHSS'}
    assert result.excluded_features == ['tPA']


@pytest.mark.filterwarnings('ignore')
def test_ranking_is_deterministic(ranker):
    first = ranker.fit(_samples())
    second = MechanismFeatureImportance(n_estimators=50, verbose=False).fit(_samples())
    pd.testing.assert_frame_equal(first.importance, second.importance)
    assert first.cv_accuracy == second.cv_accuracy


@pytest.mark.filterwarnings('ignore')
def test_unlabelled_samples_are_dropped(ranker):
    samples = _samples()
    samples.loc['S1', 'Mechanism_Code'] = np.nan
    result = ranker.fit(samples)
    assert result.n_samples == 39


@pytest.mark.filterwarnings('ignore')
def test_single_class_is_rejected(ranker):
    samples = _samples()
    samples['Mechanism_Code'] = pd.Categorical([1] * len(samples), categories=[1, 2, 3, 4, 5])
    with pytest.raises(DegenerateInputError, match='single'):
        ranker.fit(samples)


@pytest.mark.filterwarnings('ignore')
def test_too_few_samples_for_folds(ranker):
    with pytest.raises(DegenerateInputError):
        ranker.fit(_samples(n=12))


def test_missing_response_field(ranker):
    with pytest.raises(ValueError, match='Mechanism_Code'):
        ranker.fit(_samples().drop(columns=['Mechanism_Code']))


def test_importance_is_min_max_scaled():
    assert scale_importance(np.array([0.1, 0.3, 0.6])).tolist() == pytest.approx([0.0, 40.0, 100.0])
    assert scale_importance(np.array([0.2, 0.2])).tolist() == [100.0, 100.0]
    assert scale_importance(np.array([0.0, 0.0])).tolist() == [0.0, 0.0]


def test_weakest_predictor_scores_zero(ranker):
    with pytest.warns(UserWarning):
        result = ranker.fit(_samples())
    assert result.importance['importance'].min() == pytest.approx(0.0)
    assert result.importance['raw_importance'].min() > 0
