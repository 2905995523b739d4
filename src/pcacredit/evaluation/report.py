"""
Result reporting.

Prints rich console tables for the variance-explained vector, the
confusion matrix and the classification metrics, writes diagnostic PNG
plots (raw vs rotated scatter, scree, ROC) and exports the scored test set.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from rich.console import Console
from rich.table import Table

from pcacredit.schemas.output import ScoredPredictionSchema
from pcacredit.utils.logging import get_logger

if TYPE_CHECKING:
    from pcacredit.evaluation.metrics import ClassificationMetrics, RocCurve
    from pcacredit.modeling.classifier import ClassifierModel
    from pcacredit.modeling.pca import PCAModel

# Plots are only written to files
matplotlib.use("Agg")

log = get_logger(__name__)


def _fmt(value: float, digits: int = 4) -> str:
    """Format a float, rendering NaN as 'n/a'."""
    if isinstance(value, float) and math.isnan(value):
        return "n/a"
    return f"{value:.{digits}f}"


def print_variance_table(
    model: "PCAModel",
    console: Console,
    *,
    max_rows: int | None = None,
) -> None:
    """
    Print the variance explained by every fitted component.

    Retained components are highlighted; the rest are dimmed.

    Args:
        model: Fitted PCA model.
        console: Rich console for output.
        max_rows: Show at most this many components.
    """
    ratios = model.explained_variance_ratio_all
    cumulative = np.cumsum(ratios)
    n_show = len(ratios) if max_rows is None else min(max_rows, len(ratios))

    table = Table(title="Variance Explained")
    table.add_column("Component", style="cyan")
    table.add_column("Fraction", style="green", justify="right")
    table.add_column("Cumulative", style="yellow", justify="right")

    for i in range(n_show):
        style = None if i < model.n_components else "dim"
        table.add_row(
            f"PC{i + 1}",
            _fmt(float(ratios[i])),
            _fmt(float(cumulative[i])),
            style=style,
        )

    console.print(table)


def print_confusion_matrix(
    metrics: "ClassificationMetrics",
    console: Console,
    *,
    positive_label: str = "bad",
    negative_label: str = "good",
) -> None:
    """Print the confusion matrix (rows actual, columns predicted)."""
    matrix = metrics.confusion_matrix(positive_label, negative_label)

    table = Table(title=f"Confusion Matrix (threshold {metrics.threshold:g})")
    table.add_column("actual \\ predicted", style="cyan")
    for label in matrix.columns:
        table.add_column(str(label), style="green", justify="right")

    for actual, row in matrix.iterrows():
        table.add_row(str(actual), *[str(int(v)) for v in row])

    console.print(table)


def print_metrics_table(metrics: "ClassificationMetrics", console: Console) -> None:
    """Print accuracy, precision, recall, F1 and AUC."""
    table = Table(title="Classification Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Accuracy", _fmt(metrics.accuracy))
    table.add_row("Precision", _fmt(metrics.precision))
    table.add_row("Recall", _fmt(metrics.recall))
    table.add_row("F1", _fmt(metrics.f1))
    table.add_row("AUC", _fmt(metrics.auc))
    table.add_row("Test samples", str(metrics.n_samples))

    console.print(table)


def print_coefficients_table(model: "ClassifierModel", console: Console) -> None:
    """Print intercept and per-component coefficients."""
    table = Table(title="Logistic Regression Coefficients")
    table.add_column("Term", style="cyan")
    table.add_column("Estimate", style="green", justify="right")

    for term, value in model.summary().items():
        table.add_row(str(term), _fmt(float(value)))

    console.print(table)


def print_sweep_table(results: pd.DataFrame, console: Console) -> None:
    """Print the component sweep results."""
    table = Table(title="Component Sweep")
    table.add_column("k", style="cyan", justify="right")
    table.add_column("Cum. variance", style="yellow", justify="right")
    table.add_column("Accuracy", style="green", justify="right")
    table.add_column("F1", style="green", justify="right")
    table.add_column("AUC", style="magenta", justify="right")

    for row in results.itertuples(index=False):
        table.add_row(
            str(row.n_components),
            _fmt(row.cumulative_variance),
            _fmt(row.accuracy),
            _fmt(row.f1),
            _fmt(row.auc),
        )

    console.print(table)


def plot_pca_scatter(
    raw: pd.DataFrame,
    scores: pd.DataFrame,
    path: Path,
    *,
    components: np.ndarray | None = None,
) -> Path:
    """
    Side-by-side scatter of raw data and its first two component scores.

    Args:
        raw: Raw data, first two columns are plotted.
        scores: Projected scores, first two columns are plotted.
        path: Output PNG path.
        components: Optional component directions drawn as arrows on the
            raw panel (first two features).

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fig, (ax_raw, ax_pc) = plt.subplots(1, 2, figsize=(12, 5))

    x_name, y_name = raw.columns[:2]
    ax_raw.scatter(raw[x_name], raw[y_name], alpha=0.6, s=20, c="steelblue")
    if components is not None:
        center = raw[[x_name, y_name]].mean().to_numpy()
        for i, direction in enumerate(components[:2, :2]):
            ax_raw.annotate(
                "",
                xy=center + 2 * direction,
                xytext=center,
                arrowprops={"arrowstyle": "->", "color": "red", "linewidth": 2},
            )
            ax_raw.text(*(center + 2.2 * direction), f"PC{i + 1}", color="red")
    ax_raw.set_xlabel(str(x_name))
    ax_raw.set_ylabel(str(y_name))
    ax_raw.set_title("Raw data")
    ax_raw.axis("equal")
    ax_raw.grid(True, alpha=0.3)

    pc_x = scores.columns[0]
    pc_y = scores.columns[1] if scores.shape[1] > 1 else None
    ax_pc.scatter(
        scores[pc_x],
        scores[pc_y] if pc_y is not None else np.zeros(len(scores)),
        alpha=0.6,
        s=20,
        c="darkorange",
    )
    ax_pc.set_xlabel(str(pc_x))
    ax_pc.set_ylabel(str(pc_y) if pc_y is not None else "")
    ax_pc.set_title("Principal component scores")
    ax_pc.axis("equal")
    ax_pc.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.info("Saved plot", plot="pca_scatter", path=str(path))
    return path


def plot_scree(model: "PCAModel", path: Path) -> Path:
    """Scree plot of explained-variance fractions with the cumulative curve."""
    path.parent.mkdir(parents=True, exist_ok=True)
    ratios = model.explained_variance_ratio_all
    positions = np.arange(1, len(ratios) + 1)

    fig, ax = plt.subplots(figsize=(8, 5))
    colors = [
        "steelblue" if i < model.n_components else "lightgray"
        for i in range(len(ratios))
    ]
    ax.bar(positions, ratios, color=colors, label="Component")
    ax.plot(positions, np.cumsum(ratios), "r-o", markersize=3, label="Cumulative")
    ax.set_xlabel("Principal component")
    ax.set_ylabel("Fraction of variance explained")
    ax.set_title(f"Scree plot ({model.n_components} retained)")
    ax.set_ylim(0, 1.05)
    ax.legend(loc="center right")
    ax.grid(True, alpha=0.3)

    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.info("Saved plot", plot="scree", path=str(path))
    return path


def plot_roc_curve(roc: "RocCurve", path: Path) -> Path:
    """ROC curve with the chance diagonal and AUC annotation."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.plot(roc.fpr, roc.tpr, color="steelblue", linewidth=2, label="Classifier")
    ax.plot([0, 1], [0, 1], "r--", alpha=0.8, label="Chance")
    ax.text(
        0.6,
        0.1,
        f"AUC = {_fmt(roc.auc)}",
        transform=ax.transAxes,
        fontsize=10,
        bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8},
    )
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title("ROC curve")
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.legend(loc="lower right")
    ax.grid(True, alpha=0.3)

    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    log.info("Saved plot", plot="roc", path=str(path))
    return path


def scored_frame(
    actual: pd.Series,
    probabilities: np.ndarray,
    predicted: np.ndarray,
    scores: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """
    Build the validated scored test table.

    Args:
        actual: Observed labels.
        probabilities: Probabilities of the negative class.
        predicted: Thresholded labels.
        scores: Optional component scores appended as extra columns.

    Returns:
        DataFrame with actual, probability, predicted (and score) columns.
    """
    df = pd.DataFrame(
        {
            "actual": actual.to_numpy(),
            "probability": np.asarray(probabilities, dtype=float),
            "predicted": np.asarray(predicted),
        }
    )
    if scores is not None:
        df = pd.concat([df, scores.reset_index(drop=True)], axis=1)
    return ScoredPredictionSchema.validate(df)


def save_scored_predictions(
    df: pd.DataFrame,
    output_dir: Path,
    *,
    project: str,
    timestamp: str | None = None,
) -> Path:
    """
    Write the scored test table to CSV.

    Returns:
        Path of the written file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    if timestamp is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    safe_project = project.replace(" ", "_").lower()
    path = output_dir / f"{safe_project}_test_predictions_{timestamp}.csv"
    df.to_csv(path, index=False)
    log.info("Saved scored predictions", path=str(path), rows=len(df))
    return path
