"""
Feature importance ranking for the stroke mechanism classification.

A random forest predicts Mechanism_Code from the other metadata fields under
repeated stratified k-fold cross-validation. The forest is a descriptive
tool here: the data volume is too small for a deployable classifier.
"""

import warnings
import pandas as pd
import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer
from sklearn.model_selection import RepeatedStratifiedKFold
from sklearn.pipeline import Pipeline

from ...config.settings import AnalysisConfig, RESPONSE_FIELD
from ...data.schemas import DegenerateInputError
from ...utils.statistics import StatisticalAnalyzer, encode_numeric

IDENTIFIER_FIELDS = ['Clot_ID', 'Clot_Key', 'Sample_ID']


def scale_importance(raw: np.ndarray) -> np.ndarray:
    """
    Min-max scale importances to 0-100.

    The weakest feature scores 0 and the strongest 100. When every feature
    has the same positive importance all score 100.
    """
    raw = np.asarray(raw, dtype=float)
    spread = raw.max() - raw.min()
    if spread > 0:
        return 100 * (raw - raw.min()) / spread
    return np.full_like(raw, 100.0) if raw.max() > 0 else np.zeros_like(raw)


@dataclass
class FeatureImportanceResult:
    """Container for the cross-validated importance ranking."""
    importance: pd.DataFrame
    cv_accuracy: List[float]
    n_samples: int
    classes: List[str]
    excluded_features: List[str] = field(default_factory=list)

    @property
    def mean_accuracy(self) -> float:
        return float(np.mean(self.cv_accuracy))


class MechanismFeatureImportance:
    """
    Random forest importance of metadata fields for predicting a response.

    Importances are the impurity importances averaged over every fold model
    of a repeated stratified k-fold, min-max scaled so the top feature scores
    100 and the weakest 0.
    """

    def __init__(self, response: str = RESPONSE_FIELD,
                 predictors: Optional[Sequence[str]] = None,
                 n_splits: int = AnalysisConfig.CV_FOLDS,
                 n_repeats: int = AnalysisConfig.CV_REPEATS,
                 n_estimators: int = AnalysisConfig.RF_N_ESTIMATORS,
                 random_state: int = AnalysisConfig.RANDOM_SEED,
                 verbose: bool = True):
        self.response = response
        self.predictors = list(predictors) if predictors is not None else None
        self.n_splits = n_splits
        self.n_repeats = n_repeats
        self.n_estimators = n_estimators
        self.random_state = random_state
        self.verbose = verbose
        self.stats_analyzer = StatisticalAnalyzer()

    def _build_pipeline(self) -> Pipeline:
        return Pipeline([
            ('impute', SimpleImputer(strategy='median', keep_empty_features=True)),
            ('forest', RandomForestClassifier(n_estimators=self.n_estimators,
                                              random_state=self.random_state)),
        ])

    def prepare(self, samples: pd.DataFrame):
        """
        Build the predictor matrix and response vector.

        Returns:
            Tuple of (X, y, excluded_features)
        """
        if self.response not in samples.columns:
            raise ValueError(f"Response field '{self.response}' not found")

        labelled = samples[samples[self.response].notna()]
        n_unlabelled = len(samples) - len(labelled)
        if n_unlabelled and self.verbose:
            print(f"   Removed {n_unlabelled} samples without {self.response}")

        predictors = self.predictors or [
            col for col in samples.columns
            if col != self.response and col not in IDENTIFIER_FIELDS
        ]
        X = encode_numeric(labelled, predictors)
        usable, excluded = self.stats_analyzer.split_degenerate(X)
        if excluded:
            warnings.warn(f"Excluded predictors without variation: {excluded}")
        if not usable:
            raise DegenerateInputError("No predictor has more than one observed level")

        y = labelled[self.response].astype(str)
        class_counts = y.value_counts()
        if len(class_counts) < 2:
            raise DegenerateInputError(
                f"Response '{self.response}' has a single observed class"
            )
        if class_counts.max() < self.n_splits:
            raise DegenerateInputError(
                f"No class of '{self.response}' has {self.n_splits} members "
                f"for {self.n_splits}-fold cross-validation"
            )

        return X[usable], y, excluded

    def fit(self, samples: pd.DataFrame) -> FeatureImportanceResult:
        """
        Run repeated k-fold cross-validation and rank predictors.

        Args:
            samples: Sample metadata table

        Returns:
            FeatureImportanceResult sorted by descending importance
        """
        if self.verbose:
            print(f"Ranking predictors of {self.response} "
                  f"({self.n_repeats}x{self.n_splits}-fold CV, seed={self.random_state})...")

        X, y, excluded = self.prepare(samples)
        cv = RepeatedStratifiedKFold(n_splits=self.n_splits, n_repeats=self.n_repeats,
                                     random_state=self.random_state)

        fold_importances = []
        accuracies = []
        for train_idx, test_idx in cv.split(X, y):
            model = clone(self._build_pipeline())
            model.fit(X.iloc[train_idx], y.iloc[train_idx])
            accuracies.append(model.score(X.iloc[test_idx], y.iloc[test_idx]))
            fold_importances.append(model.named_steps['forest'].feature_importances_)

        raw = np.mean(fold_importances, axis=0)
        scaled = scale_importance(raw)

        importance = pd.DataFrame({
            'feature': X.columns,
            'importance': scaled,
            'raw_importance': raw,
        }).sort_values(['importance', 'feature'], ascending=[False, True], kind='mergesort')
        importance = importance.reset_index(drop=True)

        result = FeatureImportanceResult(
            importance=importance,
            cv_accuracy=accuracies,
            n_samples=len(y),
            classes=sorted(y.unique()),
            excluded_features=excluded,
        )

        if self.verbose:
            print(f"   Mean CV accuracy: {result.mean_accuracy:.3f}")
            for _, row in importance.head(5).iterrows():
                print(f"   {row['feature']}: {row['importance']:.1f}")

        return result
