"""Tests for evaluation metrics."""

import math

import numpy as np
import pytest
from structlog.testing import capture_logs

from pcacredit.config.settings import EvaluationConfig
from pcacredit.errors import DegenerateMetricError
from pcacredit.evaluation.metrics import (
    Evaluator,
    classify,
    compute_classification_metrics,
    compute_roc,
    threshold,
)


class TestThreshold:
    """Tests for threshold and classify."""

    def test_strictly_below_is_positive(self) -> None:
        """Probabilities below the threshold flag bad risk."""
        assert threshold(0.49, 0.5) is True
        assert threshold(0.51, 0.5) is False

    def test_boundary_is_negative(self) -> None:
        """A probability equal to the threshold stays negative."""
        assert threshold(0.5, 0.5) is False
        assert list(classify(np.array([0.5]), 0.5)) == ["good"]

    def test_classify_labels(self) -> None:
        """classify maps probabilities onto the configured labels."""
        predicted = classify(
            np.array([0.1, 0.9]), 0.5, positive_label="yes", negative_label="no"
        )
        assert list(predicted) == ["yes", "no"]

    def test_extreme_thresholds(self) -> None:
        """Threshold 0 flags nothing and threshold 1 flags everything below 1."""
        probs = np.array([0.0, 0.3, 0.99])
        assert list(classify(probs, 0.0)) == ["good", "good", "good"]
        assert list(classify(probs, 1.0)) == ["bad", "bad", "bad"]


class TestClassificationMetrics:
    """Tests for compute_classification_metrics."""

    def test_counts(self) -> None:
        """Confusion counts for a hand-worked example."""
        actual = np.array(["bad", "bad", "good", "good", "good"])
        probs = np.array([0.2, 0.7, 0.1, 0.8, 0.9])
        metrics = compute_classification_metrics(actual, probs)

        assert (metrics.tp, metrics.fn, metrics.fp, metrics.tn) == (1, 1, 1, 2)
        assert metrics.tp + metrics.fp + metrics.tn + metrics.fn == metrics.n_samples
        assert metrics.accuracy == pytest.approx(3 / 5)
        assert metrics.precision == pytest.approx(0.5)
        assert metrics.recall == pytest.approx(0.5)
        assert metrics.f1 == pytest.approx(0.5)

    def test_f1_harmonic_mean(self) -> None:
        """F1 equals 2PR/(P+R)."""
        actual = np.array(["bad", "bad", "bad", "good", "good"])
        probs = np.array([0.1, 0.2, 0.9, 0.3, 0.8])
        metrics = compute_classification_metrics(actual, probs)
        p, r = metrics.precision, metrics.recall
        assert (p, r) == (pytest.approx(2 / 3), pytest.approx(2 / 3))
        assert metrics.f1 == pytest.approx(2 * p * r / (p + r))

    def test_no_predicted_positives(self) -> None:
        """Precision is NaN when nothing is flagged."""
        actual = np.array(["bad", "good"])
        probs = np.array([0.9, 0.9])
        metrics = compute_classification_metrics(actual, probs)
        assert math.isnan(metrics.precision)
        assert metrics.recall == 0.0
        assert math.isnan(metrics.f1)

    def test_no_actual_positives(self) -> None:
        """Recall is NaN without positive cases, AUC too."""
        actual = np.array(["good", "good"])
        probs = np.array([0.1, 0.9])
        metrics = compute_classification_metrics(actual, probs)
        assert math.isnan(metrics.recall)
        assert math.isnan(metrics.auc)
        assert metrics.precision == 0.0

    def test_zero_precision_and_recall(self) -> None:
        """F1 is undefined when precision and recall are both 0."""
        actual = np.array(["bad", "good"])
        probs = np.array([0.9, 0.1])
        metrics = compute_classification_metrics(actual, probs)
        assert metrics.precision == 0.0
        assert metrics.recall == 0.0
        assert math.isnan(metrics.f1)

        with pytest.raises(DegenerateMetricError, match="f1"):
            compute_classification_metrics(actual, probs, strict=True)

    def test_strict_raises(self) -> None:
        """Strict mode raises on a zero denominator."""
        actual = np.array(["bad", "good"])
        probs = np.array([0.9, 0.9])
        with pytest.raises(DegenerateMetricError, match="precision"):
            compute_classification_metrics(actual, probs, strict=True)

    def test_empty_input(self) -> None:
        """Empty inputs are rejected."""
        with pytest.raises(ValueError, match="empty"):
            compute_classification_metrics(np.array([]), np.array([]))

    def test_length_mismatch(self) -> None:
        """Labels and probabilities must align."""
        with pytest.raises(ValueError, match="Length mismatch"):
            compute_classification_metrics(np.array(["bad"]), np.array([0.1, 0.2]))

    def test_confusion_matrix_layout(self) -> None:
        """Rows are actual labels and columns predictions."""
        actual = np.array(["bad", "bad", "good", "good", "good"])
        probs = np.array([0.2, 0.7, 0.1, 0.8, 0.9])
        table = compute_classification_metrics(actual, probs).confusion_matrix()
        assert table.index.name == "actual"
        assert table.columns.name == "predicted"
        assert table.loc["bad", "bad"] == 1
        assert table.loc["bad", "good"] == 1
        assert table.loc["good", "bad"] == 1
        assert table.loc["good", "good"] == 2
        assert table.to_numpy().sum() == 5

    def test_to_dict(self) -> None:
        """to_dict exposes every metric."""
        metrics = compute_classification_metrics(
            np.array(["bad", "good"]), np.array([0.1, 0.9])
        )
        result = metrics.to_dict()
        assert result["accuracy"] == 1.0
        assert result["auc"] == 1.0
        assert result["n_samples"] == 2


class TestRoc:
    """Tests for compute_roc."""

    def test_perfect_ranking(self) -> None:
        """Bad cases with the lowest probabilities give AUC 1."""
        actual = np.array(["bad", "bad", "good", "good"])
        probs = np.array([0.1, 0.2, 0.8, 0.9])
        roc = compute_roc(actual, probs)
        assert roc.auc == pytest.approx(1.0)
        assert roc.fpr[0] == 0.0
        assert roc.tpr[-1] == 1.0

    def test_inverted_ranking(self) -> None:
        """Reversed ranking gives AUC 0."""
        actual = np.array(["bad", "bad", "good", "good"])
        probs = np.array([0.9, 0.8, 0.2, 0.1])
        assert compute_roc(actual, probs).auc == pytest.approx(0.0)

    def test_single_class(self) -> None:
        """ROC is undefined with one class."""
        roc = compute_roc(np.array(["bad", "bad"]), np.array([0.1, 0.4]))
        assert math.isnan(roc.auc)
        assert len(roc.fpr) == 0


class TestEvaluator:
    """Tests for Evaluator."""

    def test_uses_configured_threshold(self) -> None:
        """The evaluator classifies with its configured threshold."""
        evaluator = Evaluator(EvaluationConfig(threshold=0.3))
        assert list(evaluator.classify(np.array([0.2, 0.3, 0.4]))) == [
            "bad",
            "good",
            "good",
        ]

    def test_strict_policy(self) -> None:
        """strict_metrics propagates to metric computation."""
        evaluator = Evaluator(EvaluationConfig(strict_metrics=True))
        with pytest.raises(DegenerateMetricError):
            evaluator.evaluate(np.array(["good", "good"]), np.array([0.9, 0.9]))

    def test_custom_labels(self) -> None:
        """Labels other than bad/good are supported."""
        evaluator = Evaluator(positive_label="default", negative_label="paid")
        metrics = evaluator.evaluate(
            np.array(["default", "paid"]), np.array([0.2, 0.8])
        )
        assert metrics.tp == 1
        assert metrics.tn == 1

    def test_reuses_precomputed_roc(self) -> None:
        """A supplied ROC curve provides the AUC without recomputation."""
        evaluator = Evaluator()
        actual = np.array(["bad", "bad", "good", "good"])
        probs = np.array([0.1, 0.2, 0.8, 0.9])
        roc = evaluator.roc(actual, probs)
        assert evaluator.evaluate(actual, probs, roc=roc).auc == roc.auc

    def test_single_class_warns_once(self) -> None:
        """Evaluating with a shared ROC logs the undefined-ROC warning once."""
        evaluator = Evaluator()
        actual = np.array(["good", "good", "good"])
        probs = np.array([0.2, 0.6, 0.9])
        with capture_logs() as logs:
            roc = evaluator.roc(actual, probs)
            metrics = evaluator.evaluate(actual, probs, roc=roc)

        events = [e for e in logs if e["event"] == "ROC undefined for a single class"]
        assert len(events) == 1
        assert math.isnan(metrics.auc)
