"""
Dataset loading and train/test partitioning.

Reads the credit CSV, drops the identifier column, recodes the label to
the configured positive/negative strings, types the predictors and
validates the result before splitting it into train and test partitions.
"""

from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype
from sklearn.model_selection import train_test_split

from pcacredit.config.settings import DataConfig, SplitConfig
from pcacredit.errors import LabelError
from pcacredit.schemas.credit import build_dataset_schema
from pcacredit.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Dataset:
    """
    Loaded dataset with typed predictors.

    Attributes:
        frame: Predictors plus the label column.
        label_column: Name of the label column.
        numeric_columns: Numeric predictor names, in file order.
        categorical_columns: Categorical predictor names, in file order.
    """

    frame: pd.DataFrame
    label_column: str
    numeric_columns: list[str]
    categorical_columns: list[str]

    @property
    def features(self) -> pd.DataFrame:
        """Predictor columns only."""
        return self.frame[self.numeric_columns + self.categorical_columns]

    @property
    def labels(self) -> pd.Series:
        """Label column."""
        return self.frame[self.label_column]

    @property
    def n_rows(self) -> int:
        """Number of rows."""
        return len(self.frame)

    def label_counts(self) -> dict[str, int]:
        """Number of rows per label."""
        return {str(k): int(v) for k, v in self.labels.value_counts().items()}


@dataclass(frozen=True)
class DatasetSplit:
    """Train and test partitions of one Dataset."""

    train: Dataset
    test: Dataset


@dataclass(frozen=True)
class FeatureMatrix:
    """
    Numeric design matrix with its aligned labels.

    Used for every stage after encoding: encoded, scaled and projected
    matrices differ only in their columns.
    """

    X: pd.DataFrame
    y: pd.Series

    @property
    def feature_names(self) -> list[str]:
        """Column names of X."""
        return list(self.X.columns)

    @property
    def n_features(self) -> int:
        """Number of columns of X."""
        return self.X.shape[1]


def load_dataset(path: Path, data_config: DataConfig) -> Dataset:
    """
    Load the credit dataset from a CSV file.

    Args:
        path: Path to the CSV file (header row required).
        data_config: Dataset layout configuration.

    Returns:
        Validated Dataset.

    Raises:
        FileNotFoundError: If the data file does not exist.
        ValueError: If the label or a configured column is missing.
        LabelError: If a label value is outside the configured pair.
        pandera.errors.SchemaError: If the prepared frame fails validation.
    """
    if not path.exists():
        msg = f"Dataset file not found: {path}"
        raise FileNotFoundError(msg)

    log.info("Loading dataset", path=str(path))
    df = pd.read_csv(path)
    log.info("Loaded raw data", rows=len(df), columns=list(df.columns))

    return prepare_dataset(df, data_config)


def prepare_dataset(df: pd.DataFrame, data_config: DataConfig) -> Dataset:
    """
    Turn a raw frame into a validated Dataset.

    The input frame is not modified.

    Args:
        df: Raw frame as read from disk.
        data_config: Dataset layout configuration.

    Returns:
        Validated Dataset.
    """
    df = _drop_id_column(df, data_config.id_column)

    label_col = data_config.label_column
    if label_col not in df.columns:
        msg = f"Missing label column: {label_col}"
        raise ValueError(msg)

    df = df.assign(**{label_col: recode_labels(df[label_col], data_config)})

    categorical_cols = _get_categorical_columns(df, data_config)
    numeric_cols = [
        col for col in df.columns if col != label_col and col not in categorical_cols
    ]
    non_numeric = [col for col in numeric_cols if not is_numeric_dtype(df[col])]
    if non_numeric:
        msg = f"Columns are neither numeric nor declared categorical: {non_numeric}"
        raise ValueError(msg)

    if categorical_cols:
        df = df.assign(
            **{
                col: _fill_levels(df[col], data_config.missing_level)
                for col in categorical_cols
            }
        )

    before = len(df)
    df = df.dropna(subset=numeric_cols).reset_index(drop=True)
    if len(df) < before:
        log.info(
            "Dropped rows with missing numeric values",
            dropped=before - len(df),
            remaining=len(df),
        )

    schema = build_dataset_schema(
        data_config,
        numeric_columns=numeric_cols,
        categorical_columns=categorical_cols,
    )
    df = schema.validate(df)

    dataset = Dataset(
        frame=df,
        label_column=label_col,
        numeric_columns=numeric_cols,
        categorical_columns=categorical_cols,
    )
    log.info(
        "Prepared dataset",
        rows=dataset.n_rows,
        numeric=len(numeric_cols),
        categorical=len(categorical_cols),
        labels=dataset.label_counts(),
    )
    return dataset


def recode_labels(labels: pd.Series, data_config: DataConfig) -> pd.Series:
    """
    Normalise raw label values to the configured label strings.

    Raw values are compared as stripped strings. A value listed in
    label_mapping is replaced by its target; anything else must already be
    one of the two labels.

    Raises:
        LabelError: If a value cannot be mapped to either label.
    """
    raw = labels.astype(str).str.strip()
    recoded = raw.map(lambda v: data_config.label_mapping.get(v, v))

    allowed = {data_config.positive_label, data_config.negative_label}
    unexpected = sorted(set(recoded.unique()) - allowed)
    if unexpected:
        msg = (
            f"Label column '{labels.name}' has values outside "
            f"{sorted(allowed)}: {unexpected}"
        )
        raise LabelError(msg)

    return recoded


def split_dataset(dataset: Dataset, split_config: SplitConfig) -> DatasetSplit:
    """
    Split a dataset into train and test partitions.

    Args:
        dataset: Dataset to split.
        split_config: Test fraction, seed and stratification flag.

    Returns:
        DatasetSplit with both partitions sharing the column layout.
    """
    stratify = dataset.labels if split_config.stratify else None
    train_df, test_df = train_test_split(
        dataset.frame,
        test_size=split_config.test_size,
        random_state=split_config.random_state,
        stratify=stratify,
    )

    def _partition(frame: pd.DataFrame) -> Dataset:
        return Dataset(
            frame=frame.reset_index(drop=True),
            label_column=dataset.label_column,
            numeric_columns=dataset.numeric_columns,
            categorical_columns=dataset.categorical_columns,
        )

    split = DatasetSplit(train=_partition(train_df), test=_partition(test_df))
    log.info(
        "Split dataset",
        n_train=split.train.n_rows,
        n_test=split.test.n_rows,
        stratified=split_config.stratify,
    )
    return split


def _drop_id_column(df: pd.DataFrame, id_column: str | None) -> pd.DataFrame:
    """Drop the identifier column if configured and present."""
    if id_column is None:
        return df
    if id_column not in df.columns:
        log.debug("Identifier column not present", column=id_column)
        return df
    return df.drop(columns=[id_column])


def _fill_levels(values: pd.Series, missing_level: str) -> pd.Series:
    """Stringify categorical levels, giving missing values their own level."""
    as_object = values.astype(object)
    return as_object.where(values.notna(), missing_level).astype(str)


def _get_categorical_columns(df: pd.DataFrame, data_config: DataConfig) -> list[str]:
    """Configured categorical columns, or non-numeric/bool columns in file order."""
    label_col = data_config.label_column

    if data_config.categorical_columns is not None:
        missing = [c for c in data_config.categorical_columns if c not in df.columns]
        if missing:
            msg = f"Missing categorical columns: {missing}"
            raise ValueError(msg)
        configured = set(data_config.categorical_columns)
        return [c for c in df.columns if c in configured and c != label_col]

    return [
        col
        for col in df.columns
        if col != label_col
        and (is_bool_dtype(df[col]) or not is_numeric_dtype(df[col]))
    ]
