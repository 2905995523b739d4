"""
Evaluation metrics for the binary credit-risk classifier.

The classifier outputs the probability of the negative ("good") class, so a
case is flagged positive ("bad") when that probability falls strictly below
the threshold. A probability exactly equal to the threshold stays negative.
"""

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.metrics import auc as sklearn_auc
from sklearn.metrics import roc_curve

from pcacredit.config.settings import EvaluationConfig
from pcacredit.errors import DegenerateMetricError
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)


def threshold(prob: float, t: float) -> bool:
    """True (positive) if ``prob < t``."""
    return prob < t


def classify(
    probabilities: np.ndarray,
    t: float,
    *,
    positive_label: str = "bad",
    negative_label: str = "good",
) -> np.ndarray:
    """Threshold probabilities into label strings."""
    probabilities = np.asarray(probabilities, dtype=float).ravel()
    return np.where(probabilities < t, positive_label, negative_label)


@dataclass(frozen=True)
class RocCurve:
    """
    ROC curve of the positive class.

    Attributes:
        fpr: False positive rates.
        tpr: True positive rates.
        thresholds: Score thresholds on the positive-class score
            (``1 - probability``).
        auc: Area under the curve (NaN if only one class is present).
    """

    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    auc: float


@dataclass(frozen=True)
class ClassificationMetrics:
    """
    Confusion-matrix counts and derived metrics.

    Attributes:
        tp: Positive cases predicted positive.
        fp: Negative cases predicted positive.
        tn: Negative cases predicted negative.
        fn: Positive cases predicted negative.
        accuracy: (TP+TN)/N
        precision: TP/(TP+FP), NaN when undefined
        recall: TP/(TP+FN), NaN when undefined
        f1: Harmonic mean of precision and recall, NaN when undefined
        auc: Area under the ROC curve
        threshold: Probability threshold used for classification
        n_samples: Number of evaluated cases
    """

    tp: int
    fp: int
    tn: int
    fn: int
    accuracy: float
    precision: float
    recall: float
    f1: float
    auc: float
    threshold: float
    n_samples: int

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "tp": self.tp,
            "fp": self.fp,
            "tn": self.tn,
            "fn": self.fn,
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "auc": self.auc,
            "threshold": self.threshold,
            "n_samples": self.n_samples,
        }

    def confusion_matrix(
        self, positive_label: str = "bad", negative_label: str = "good"
    ) -> pd.DataFrame:
        """Counts with actual labels as rows and predictions as columns."""
        return pd.DataFrame(
            [[self.tn, self.fp], [self.fn, self.tp]],
            index=pd.Index([negative_label, positive_label], name="actual"),
            columns=pd.Index([negative_label, positive_label], name="predicted"),
        )

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Accuracy={self.accuracy:.4f}, Precision={self.precision:.4f}, "
            f"Recall={self.recall:.4f}, F1={self.f1:.4f}, AUC={self.auc:.4f}"
        )


def _ratio(num: float, den: float, name: str, *, strict: bool) -> float:
    if den == 0:
        if strict:
            raise DegenerateMetricError(name)
        log.warning("Metric undefined, reporting NaN", metric=name)
        return math.nan
    return num / den


def compute_roc(
    actual: np.ndarray,
    probabilities: np.ndarray,
    *,
    positive_label: str = "bad",
) -> RocCurve:
    """
    ROC curve over all thresholds.

    The positive class is scored with ``1 - probability`` so that higher
    scores mean riskier cases.

    Args:
        actual: Observed label strings.
        probabilities: Predicted probabilities of the negative class.
        positive_label: Label of the positive class.

    Returns:
        RocCurve; its auc is NaN if only one class is present.
    """
    y_true = np.asarray(actual).ravel() == positive_label
    scores = 1.0 - np.asarray(probabilities, dtype=float).ravel()

    if y_true.all() or not y_true.any():
        log.warning("ROC undefined for a single class", n_samples=len(y_true))
        empty = np.array([], dtype=float)
        return RocCurve(fpr=empty, tpr=empty, thresholds=empty, auc=math.nan)

    fpr, tpr, thresholds = roc_curve(y_true, scores)
    return RocCurve(
        fpr=fpr,
        tpr=tpr,
        thresholds=thresholds,
        auc=float(sklearn_auc(fpr, tpr)),
    )


def compute_classification_metrics(
    actual: np.ndarray,
    probabilities: np.ndarray,
    *,
    threshold: float = 0.5,
    positive_label: str = "bad",
    negative_label: str = "good",
    strict: bool = False,
    roc: RocCurve | None = None,
) -> ClassificationMetrics:
    """
    Compute confusion counts, accuracy, precision, recall, F1 and AUC.

    Counts compare label strings by exact equality.

    Args:
        actual: Observed label strings.
        probabilities: Predicted probabilities of the negative class.
        threshold: Cases with probability strictly below it are positive.
        positive_label: Label of the positive class.
        negative_label: Label of the negative class.
        strict: Raise DegenerateMetricError instead of returning NaN.
        roc: Precomputed ROC curve for the same inputs; computed when omitted.

    Returns:
        ClassificationMetrics object.

    Raises:
        ValueError: If inputs are empty or differ in length.
        DegenerateMetricError: If strict and a denominator is zero.
    """
    actual = np.asarray(actual).ravel()
    probabilities = np.asarray(probabilities, dtype=float).ravel()

    if len(actual) == 0:
        msg = "Cannot evaluate an empty set of predictions"
        raise ValueError(msg)
    if len(actual) != len(probabilities):
        msg = f"Length mismatch: {len(actual)} labels vs {len(probabilities)} probabilities"
        raise ValueError(msg)

    predicted = classify(
        probabilities,
        threshold,
        positive_label=positive_label,
        negative_label=negative_label,
    )

    is_pos = actual == positive_label
    is_neg = actual == negative_label
    pred_pos = predicted == positive_label
    pred_neg = predicted == negative_label

    tp = int(np.sum(is_pos & pred_pos))
    fp = int(np.sum(is_neg & pred_pos))
    tn = int(np.sum(is_neg & pred_neg))
    fn = int(np.sum(is_pos & pred_neg))
    n = tp + fp + tn + fn

    precision = _ratio(tp, tp + fp, "precision", strict=strict)
    recall = _ratio(tp, tp + fn, "recall", strict=strict)
    if math.isnan(precision) or math.isnan(recall):
        f1 = math.nan
    else:
        f1 = _ratio(2 * precision * recall, precision + recall, "f1", strict=strict)

    if roc is None:
        roc = compute_roc(actual, probabilities, positive_label=positive_label)

    metrics = ClassificationMetrics(
        tp=tp,
        fp=fp,
        tn=tn,
        fn=fn,
        accuracy=(tp + tn) / n if n else math.nan,
        precision=precision,
        recall=recall,
        f1=f1,
        auc=roc.auc,
        threshold=threshold,
        n_samples=len(actual),
    )
    log.debug("Computed metrics", **metrics.to_dict())
    return metrics


class Evaluator:
    """Applies the configured threshold and metric policy."""

    def __init__(
        self,
        config: EvaluationConfig | None = None,
        *,
        positive_label: str = "bad",
        negative_label: str = "good",
    ) -> None:
        self.config = config or EvaluationConfig()
        self.positive_label = positive_label
        self.negative_label = negative_label

    def classify(self, probabilities: np.ndarray) -> np.ndarray:
        """Threshold probabilities into label strings."""
        return classify(
            probabilities,
            self.config.threshold,
            positive_label=self.positive_label,
            negative_label=self.negative_label,
        )

    def evaluate(
        self,
        actual: np.ndarray,
        probabilities: np.ndarray,
        roc: RocCurve | None = None,
    ) -> ClassificationMetrics:
        """Compute all metrics for one scored partition."""
        return compute_classification_metrics(
            actual,
            probabilities,
            threshold=self.config.threshold,
            positive_label=self.positive_label,
            negative_label=self.negative_label,
            strict=self.config.strict_metrics,
            roc=roc,
        )

    def roc(self, actual: np.ndarray, probabilities: np.ndarray) -> RocCurve:
        """ROC curve for one scored partition."""
        return compute_roc(actual, probabilities, positive_label=self.positive_label)
