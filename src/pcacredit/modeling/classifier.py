"""
Weighted logistic regression on principal component scores.

The response is the negative ("good") class, so predicted probabilities are
probabilities of good credit. Bad-risk rows get the larger sample weight
(0.66 against 0.34 by default) to offset the class imbalance of the
credit data.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression

from pcacredit.config.settings import ClassifierConfig
from pcacredit.modeling.data import FeatureMatrix
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ClassifierModel:
    """
    Fitted logistic regression.

    Attributes:
        intercept: Fitted intercept.
        coefficients: One coefficient per input column.
        positive_label: Label of the positive (bad) class.
        negative_label: Label of the modelled (good) class.
    """

    intercept: float
    coefficients: pd.Series
    positive_label: str
    negative_label: str
    _model: LogisticRegression

    @property
    def feature_names(self) -> list[str]:
        """Input column names."""
        return list(self.coefficients.index)

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """
        Probability of the negative class for each row, in [0, 1].

        Raises:
            ValueError: If the columns differ from the fitted ones.
        """
        if list(X.columns) != self.feature_names:
            msg = f"Expected columns {self.feature_names}, got {list(X.columns)}"
            raise ValueError(msg)
        proba = self._model.predict_proba(X.to_numpy(dtype=float))
        negative_idx = int(np.flatnonzero(self._model.classes_ == 1)[0])
        return proba[:, negative_idx]

    def summary(self) -> pd.Series:
        """Intercept followed by the coefficients."""
        return pd.concat(
            [pd.Series({"(Intercept)": self.intercept}), self.coefficients]
        )


class Classifier:
    """Fits a ClassifierModel with fixed class weights."""

    def __init__(
        self,
        config: ClassifierConfig | None = None,
        *,
        positive_label: str = "bad",
        negative_label: str = "good",
    ) -> None:
        self.config = config or ClassifierConfig()
        self.positive_label = positive_label
        self.negative_label = negative_label

    def sample_weights(self, y: pd.Series) -> np.ndarray:
        """Per-row weight: positive_weight for positive rows, else negative_weight."""
        return np.where(
            y.to_numpy() == self.positive_label,
            self.config.positive_weight,
            self.config.negative_weight,
        )

    def fit(self, train: FeatureMatrix) -> ClassifierModel:
        """
        Fit the weighted logistic regression.

        Args:
            train: Projected training matrix with labels.

        Returns:
            Fitted ClassifierModel.

        Raises:
            ValueError: If the training labels contain a single class.
        """
        y = (train.y.to_numpy() == self.negative_label).astype(int)
        if len(np.unique(y)) < 2:
            msg = "Training labels contain a single class; cannot fit classifier"
            raise ValueError(msg)

        weights = self.sample_weights(train.y)
        model = LogisticRegression(
            C=self.config.C,
            solver="lbfgs",
            max_iter=self.config.max_iter,
        )
        model.fit(train.X.to_numpy(dtype=float), y, sample_weight=weights)

        fitted = ClassifierModel(
            intercept=float(model.intercept_[0]),
            coefficients=pd.Series(
                model.coef_[0], index=list(train.X.columns), name="coefficient"
            ),
            positive_label=self.positive_label,
            negative_label=self.negative_label,
            _model=model,
        )
        log.info(
            "Fitted classifier",
            n_samples=len(y),
            n_features=train.n_features,
            intercept=round(fitted.intercept, 4),
            positive_weight=self.config.positive_weight,
            negative_weight=self.config.negative_weight,
        )
        return fitted
