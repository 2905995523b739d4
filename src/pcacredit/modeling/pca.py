"""
Principal component reduction.

Components are the right singular vectors of the training matrix, which are
the eigenvectors of its covariance matrix, sorted by descending eigenvalue.
Projected scores are multiplied by each component's explained-variance
fraction. That weighting is not part of standard PCA; it shrinks minor
components before they reach the classifier. Set
``pca.scale_by_variance: false`` to get plain scores.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from pcacredit.config.settings import PCAConfig
from pcacredit.modeling.data import FeatureMatrix
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)


def component_names(n: int) -> list[str]:
    """Column names PC1..PCn."""
    return [f"PC{i + 1}" for i in range(n)]


@dataclass(frozen=True)
class PCAModel:
    """
    Fitted principal components.

    Attributes:
        components: Retained unit-length, mutually orthogonal directions,
            shape (k, n_features), ordered by descending variance.
        eigenvalues: Covariance eigenvalue of each retained component.
        explained_variance_ratio: Fraction of total variance per retained
            component.
        explained_variance_ratio_all: Fractions for every fitted component,
            summing to 1.0. Kept for scree reporting.
        feature_names: Input column names.
        mean: Training column means (near zero for standardised input).
        center: Subtract ``mean`` before projecting.
        scale_by_variance: Multiply scores by their variance fraction.
    """

    components: np.ndarray
    eigenvalues: np.ndarray
    explained_variance_ratio: np.ndarray
    explained_variance_ratio_all: np.ndarray
    feature_names: tuple[str, ...]
    mean: np.ndarray
    center: bool = False
    scale_by_variance: bool = True

    @property
    def n_components(self) -> int:
        """Number of retained components."""
        return self.components.shape[0]

    @property
    def cumulative_variance(self) -> np.ndarray:
        """Cumulative explained-variance fractions of retained components."""
        return np.cumsum(self.explained_variance_ratio)

    @property
    def loadings(self) -> pd.DataFrame:
        """Components as a (feature x component) table."""
        return pd.DataFrame(
            self.components.T,
            index=list(self.feature_names),
            columns=component_names(self.n_components),
        )

    def project(self, X: pd.DataFrame) -> pd.DataFrame:
        """
        Project rows onto the retained components.

        Each score is the dot product of the row with a component,
        multiplied by that component's explained-variance fraction when
        ``scale_by_variance`` is set.

        Raises:
            ValueError: If the columns differ from the fitted ones.
        """
        if tuple(str(c) for c in X.columns) != self.feature_names:
            msg = (
                "Matrix columns do not match the PCA model "
                f"({X.shape[1]} vs {len(self.feature_names)} columns)"
            )
            raise ValueError(msg)

        values = X.to_numpy(dtype=float)
        if self.center:
            values = values - self.mean
        scores = values @ self.components.T
        if self.scale_by_variance:
            scores = scores * self.explained_variance_ratio

        return pd.DataFrame(
            scores, columns=component_names(self.n_components), index=X.index
        )

    def transform(self, matrix: FeatureMatrix) -> FeatureMatrix:
        """Project a labelled matrix, keeping its labels."""
        return FeatureMatrix(X=self.project(matrix.X), y=matrix.y)


class PCAReducer:
    """Fits a PCAModel on a training matrix."""

    def __init__(self, config: PCAConfig | None = None, *, center: bool = False) -> None:
        """
        Initialize reducer.

        Args:
            config: Component count and score scaling. Defaults to keeping
                every component with variance-fraction scaling.
            center: Subtract the training mean when projecting. The credit
                pipeline standardises first, so it leaves this off.
        """
        self.config = config or PCAConfig(n_components=None)
        self.center = center

    def fit(self, X: pd.DataFrame, k: int | None = None) -> PCAModel:
        """
        Compute principal components of the training matrix.

        Args:
            X: Training matrix (rows = observations).
            k: Components to retain. Defaults to ``config.n_components``;
                None keeps every component.

        Returns:
            Fitted PCAModel.

        Raises:
            ValueError: If k is below 1 or exceeds the feature count, or the
                matrix has fewer than two rows.
        """
        n_samples, n_features = X.shape
        if n_samples < 2:
            msg = f"PCA needs at least two observations, got {n_samples}"
            raise ValueError(msg)

        if k is None:
            k = self.config.n_components
        if k is not None and not 1 <= k <= n_features:
            msg = f"n_components must be between 1 and {n_features}, got {k}"
            raise ValueError(msg)

        pca = PCA(n_components=None, svd_solver="full")
        pca.fit(X.to_numpy(dtype=float))

        eigenvalues_all = pca.explained_variance_
        total = eigenvalues_all.sum()
        ratio_all = (
            eigenvalues_all / total if total > 0 else np.zeros_like(eigenvalues_all)
        )

        n_available = pca.components_.shape[0]
        n_keep = n_available if k is None else k
        if n_keep > n_available:
            msg = (
                f"Only {n_available} components can be extracted from "
                f"{n_samples} observations, requested {n_keep}"
            )
            raise ValueError(msg)

        model = PCAModel(
            components=pca.components_[:n_keep].copy(),
            eigenvalues=eigenvalues_all[:n_keep].copy(),
            explained_variance_ratio=ratio_all[:n_keep].copy(),
            explained_variance_ratio_all=ratio_all.copy(),
            feature_names=tuple(str(c) for c in X.columns),
            mean=pca.mean_.copy(),
            center=self.center,
            scale_by_variance=self.config.scale_by_variance,
        )

        log.info(
            "Fitted PCA",
            n_features=n_features,
            n_components=model.n_components,
            retained_variance=round(float(model.cumulative_variance[-1]), 4),
            first_component=round(float(ratio_all[0]), 4),
        )
        return model
