"""
Standardisation of the encoded design matrix.

Means and standard deviations come from the training matrix only and are
applied unchanged to every partition.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from pcacredit.errors import ZeroVarianceError
from pcacredit.modeling.data import FeatureMatrix
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)

# Relative tolerance below which a training column counts as constant
ZERO_VARIANCE_TOLERANCE = 1e-12


@dataclass(frozen=True)
class ScalingParameters:
    """
    Fitted per-column mean and (population) standard deviation.

    Attributes:
        columns: Column names in matrix order.
        mean: Training mean per column.
        std: Training standard deviation per column (ddof=0).
    """

    columns: tuple[str, ...]
    mean: pd.Series
    std: pd.Series
    _scaler: StandardScaler

    def transform(self, matrix: FeatureMatrix) -> FeatureMatrix:
        """
        Apply ``(value - mean) / std`` column-wise.

        Raises:
            ValueError: If the matrix columns differ from the fitted ones.
        """
        if tuple(matrix.X.columns) != self.columns:
            msg = (
                "Matrix columns do not match the scaling parameters "
                f"({matrix.n_features} vs {len(self.columns)} columns)"
            )
            raise ValueError(msg)

        values = self._scaler.transform(matrix.X.to_numpy(dtype=float))
        X = pd.DataFrame(values, columns=list(self.columns), index=matrix.X.index)
        return FeatureMatrix(X=X, y=matrix.y)


class Scaler:
    """Fits ScalingParameters on a training matrix."""

    def fit(self, train: FeatureMatrix) -> ScalingParameters:
        """
        Compute per-column mean and standard deviation.

        Args:
            train: Encoded training matrix.

        Returns:
            Fitted ScalingParameters.

        Raises:
            ZeroVarianceError: If any column is constant in training.
        """
        scaler = StandardScaler(with_mean=True, with_std=True)
        scaler.fit(train.X.to_numpy(dtype=float))

        mean = pd.Series(scaler.mean_, index=train.X.columns, name="mean")
        std = pd.Series(np.sqrt(scaler.var_), index=train.X.columns, name="std")

        tolerance = ZERO_VARIANCE_TOLERANCE * np.maximum(1.0, mean.abs())
        constant = [str(col) for col in std.index[std <= tolerance]]
        if constant:
            raise ZeroVarianceError(constant)

        log.info("Fitted scaling parameters", n_columns=len(std))
        log.debug(
            "Scaling parameters",
            mean=mean.round(4).to_dict(),
            std=std.round(4).to_dict(),
        )
        return ScalingParameters(
            columns=tuple(str(c) for c in train.X.columns),
            mean=mean,
            std=std,
            _scaler=scaler,
        )
