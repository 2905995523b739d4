"""
Dummy encoding of categorical predictors.

The encoding scheme is learned from the training partition only and then
applied unchanged to every partition, so train and test matrices always
share the same fixed-width column layout.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.preprocessing import OneHotEncoder

from pcacredit.config.settings import EncodingConfig, UnknownCategoryPolicy
from pcacredit.errors import UnknownCategoryError
from pcacredit.modeling.data import Dataset, FeatureMatrix
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class EncodingScheme:
    """
    Fitted mapping from categorical levels to dummy-column positions.

    Attributes:
        numeric_columns: Numeric predictors, passed through first.
        categorical_columns: Categorical predictors, expanded after them.
        levels: Training levels per categorical column, sorted.
        feature_names: Output column names (numeric, then ``<col>_<level>``).
        handle_unknown: Policy for levels not present in ``levels``.
    """

    numeric_columns: tuple[str, ...]
    categorical_columns: tuple[str, ...]
    levels: dict[str, tuple[str, ...]]
    feature_names: tuple[str, ...]
    handle_unknown: UnknownCategoryPolicy
    _encoder: OneHotEncoder | None

    @property
    def width(self) -> int:
        """Number of output columns."""
        return len(self.feature_names)

    def transform(self, dataset: Dataset) -> FeatureMatrix:
        """
        Encode a dataset into a fixed-width numeric matrix.

        The dataset is not modified.

        Raises:
            ValueError: If the dataset's predictors differ from the fitted ones.
            UnknownCategoryError: If an unseen level appears and the
                policy is ``error``.
        """
        self._check_columns(dataset)
        frame = dataset.frame
        self._check_unknown(frame)

        blocks = [frame[list(self.numeric_columns)].to_numpy(dtype=float)]
        if self._encoder is not None:
            blocks.append(
                self._encoder.transform(frame[list(self.categorical_columns)])
            )
        values = np.hstack(blocks)

        X = pd.DataFrame(values, columns=list(self.feature_names), index=frame.index)
        return FeatureMatrix(X=X, y=dataset.labels.copy())

    def _check_columns(self, dataset: Dataset) -> None:
        if (
            tuple(dataset.numeric_columns) != self.numeric_columns
            or tuple(dataset.categorical_columns) != self.categorical_columns
        ):
            msg = (
                "Dataset predictors do not match the encoding scheme: "
                f"expected numeric={list(self.numeric_columns)}, "
                f"categorical={list(self.categorical_columns)}"
            )
            raise ValueError(msg)

    def _check_unknown(self, frame: pd.DataFrame) -> None:
        for col in self.categorical_columns:
            known = set(self.levels[col])
            unseen = sorted(set(frame[col].unique()) - known)
            if not unseen:
                continue
            if self.handle_unknown == UnknownCategoryPolicy.ERROR:
                raise UnknownCategoryError(col, unseen)
            log.warning(
                "Unseen levels encoded as all-zero block",
                column=col,
                levels=unseen,
                rows=int(frame[col].isin(unseen).sum()),
            )


class Encoder:
    """Builds an EncodingScheme from training data."""

    def __init__(self, config: EncodingConfig | None = None) -> None:
        self.config = config or EncodingConfig()

    def fit(self, train: Dataset) -> EncodingScheme:
        """
        Learn the dummy layout from the training partition.

        Args:
            train: Training dataset.

        Returns:
            Fitted EncodingScheme.
        """
        categorical = list(train.categorical_columns)
        encoder: OneHotEncoder | None = None
        levels: dict[str, tuple[str, ...]] = {}
        dummy_names: list[str] = []

        if categorical:
            encoder = OneHotEncoder(
                handle_unknown="ignore",
                drop="first" if self.config.drop_first else None,
                sparse_output=False,
                dtype=np.float64,
            )
            encoder.fit(train.frame[categorical])
            levels = {
                col: tuple(str(level) for level in cats)
                for col, cats in zip(categorical, encoder.categories_)
            }
            dummy_names = [str(n) for n in encoder.get_feature_names_out(categorical)]

        scheme = EncodingScheme(
            numeric_columns=tuple(train.numeric_columns),
            categorical_columns=tuple(categorical),
            levels=levels,
            feature_names=tuple(train.numeric_columns) + tuple(dummy_names),
            handle_unknown=self.config.handle_unknown,
            _encoder=encoder,
        )
        log.info(
            "Fitted encoding scheme",
            n_numeric=len(scheme.numeric_columns),
            n_dummies=len(dummy_names),
            width=scheme.width,
            drop_first=self.config.drop_first,
        )
        return scheme
