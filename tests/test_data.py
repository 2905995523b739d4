"""Tests for dataset loading and splitting."""

from pathlib import Path

import numpy as np
import pandas as pd
import pandera.errors
import pytest

from pcacredit.config.settings import DataConfig, SplitConfig
from pcacredit.errors import LabelError
from pcacredit.modeling.data import (
    load_dataset,
    prepare_dataset,
    recode_labels,
    split_dataset,
)


class TestLoadDataset:
    """Tests for load_dataset and prepare_dataset."""

    def test_drops_identifier_column(self, credit_csv: Path) -> None:
        """The identifier column is not part of the dataset."""
        dataset = load_dataset(credit_csv, DataConfig())
        assert "Unnamed: 0" not in dataset.frame.columns
        assert dataset.n_rows == 1000

    def test_infers_predictor_types(self, credit_csv: Path) -> None:
        """String columns are categorical, the rest numeric, in file order."""
        dataset = load_dataset(credit_csv, DataConfig())
        assert dataset.numeric_columns == ["Age", "Job", "Credit amount", "Duration"]
        assert dataset.categorical_columns == [
            "Sex",
            "Housing",
            "Saving accounts",
            "Checking account",
            "Purpose",
        ]
        assert dataset.label_column == "Risk"

    def test_missing_categorical_becomes_level(self, credit_csv: Path) -> None:
        """Missing account values get their own level."""
        dataset = load_dataset(credit_csv, DataConfig())
        checking = dataset.frame["Checking account"]
        assert checking.notna().all()
        assert "missing" in set(checking)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing CSV raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="not found"):
            load_dataset(tmp_path / "absent.csv", DataConfig())

    def test_missing_label_column(self, credit_frame: pd.DataFrame) -> None:
        """A frame without the label column is rejected."""
        with pytest.raises(ValueError, match="Missing label column"):
            prepare_dataset(credit_frame.drop(columns=["Risk"]), DataConfig())

    def test_input_frame_unchanged(self, credit_frame: pd.DataFrame) -> None:
        """Preparing a dataset does not modify the raw frame."""
        before = credit_frame.copy()
        prepare_dataset(credit_frame, DataConfig())
        pd.testing.assert_frame_equal(credit_frame, before)

    def test_drops_rows_with_missing_numeric(
        self, credit_frame: pd.DataFrame
    ) -> None:
        """Rows with a missing numeric predictor are dropped."""
        df = credit_frame.copy()
        df.loc[[0, 1, 2], "Age"] = np.nan
        dataset = prepare_dataset(df, DataConfig())
        assert dataset.n_rows == 997

    def test_configured_categoricals(self, credit_frame: pd.DataFrame) -> None:
        """Declared categorical columns include numeric-coded ones."""
        config = DataConfig(
            categorical_columns=[
                "Sex",
                "Job",
                "Housing",
                "Saving accounts",
                "Checking account",
                "Purpose",
            ]
        )
        dataset = prepare_dataset(credit_frame, config)
        assert "Job" in dataset.categorical_columns
        assert "Job" not in dataset.numeric_columns
        assert set(dataset.frame["Job"]) <= {"0", "1", "2", "3"}

    def test_unknown_configured_categorical(self, credit_frame: pd.DataFrame) -> None:
        """Declaring a column that does not exist fails."""
        with pytest.raises(ValueError, match="Missing categorical columns"):
            prepare_dataset(credit_frame, DataConfig(categorical_columns=["Nope"]))

    def test_undeclared_string_columns(self, credit_frame: pd.DataFrame) -> None:
        """Kept non-numeric columns must be declared categorical."""
        config = DataConfig(id_column=None, categorical_columns=["Sex"])
        with pytest.raises(ValueError, match="neither numeric nor declared"):
            prepare_dataset(credit_frame, config)

        numeric_only = credit_frame[["Unnamed: 0", "Age", "Risk"]]
        dataset = prepare_dataset(numeric_only, DataConfig(id_column=None))
        assert "Unnamed: 0" in dataset.numeric_columns


class TestRecodeLabels:
    """Tests for recode_labels."""

    def test_passthrough(self) -> None:
        """Values already equal to the labels are kept."""
        labels = pd.Series(["good", "bad", " good "], name="Risk")
        assert list(recode_labels(labels, DataConfig())) == ["good", "bad", "good"]

    def test_mapping(self) -> None:
        """Numeric Statlog codes are mapped through label_mapping."""
        config = DataConfig(label_mapping={"1": "good", "2": "bad"})
        labels = pd.Series([1, 2, 2, 1], name="default")
        assert list(recode_labels(labels, config)) == ["good", "bad", "bad", "good"]

    def test_unexpected_value(self) -> None:
        """Values outside the label pair raise LabelError."""
        labels = pd.Series(["good", "unknown"], name="Risk")
        with pytest.raises(LabelError, match="unknown"):
            recode_labels(labels, DataConfig())

    def test_missing_label_value(self) -> None:
        """A missing label is not silently accepted."""
        labels = pd.Series(["good", None], name="Risk")
        with pytest.raises(LabelError):
            recode_labels(labels, DataConfig())


class TestSplitDataset:
    """Tests for split_dataset."""

    def test_split_sizes(self, credit_csv: Path) -> None:
        """Default split is 70/30."""
        dataset = load_dataset(credit_csv, DataConfig())
        split = split_dataset(dataset, SplitConfig())
        assert split.train.n_rows == 700
        assert split.test.n_rows == 300

    def test_same_schema(self, credit_csv: Path) -> None:
        """Both partitions share columns and predictor typing."""
        dataset = load_dataset(credit_csv, DataConfig())
        split = split_dataset(dataset, SplitConfig())
        assert list(split.train.frame.columns) == list(split.test.frame.columns)
        assert split.train.numeric_columns == split.test.numeric_columns
        assert split.train.categorical_columns == split.test.categorical_columns

    def test_stratified(self, credit_csv: Path) -> None:
        """Stratification keeps the bad rate equal across partitions."""
        dataset = load_dataset(credit_csv, DataConfig())
        split = split_dataset(dataset, SplitConfig(stratify=True))
        train_rate = (split.train.labels == "bad").mean()
        test_rate = (split.test.labels == "bad").mean()
        assert abs(train_rate - test_rate) < 0.01

    def test_reproducible(self, credit_csv: Path) -> None:
        """The same seed gives the same partitions."""
        dataset = load_dataset(credit_csv, DataConfig())
        first = split_dataset(dataset, SplitConfig(random_state=3))
        second = split_dataset(dataset, SplitConfig(random_state=3))
        pd.testing.assert_frame_equal(first.test.frame, second.test.frame)

    def test_schema_error_type(self) -> None:
        """Schema violations surface as pandera errors."""
        from pcacredit.schemas.credit import build_dataset_schema

        schema = build_dataset_schema(
            DataConfig(), numeric_columns=["x"], categorical_columns=[]
        )
        bad = pd.DataFrame({"x": [1.0], "Risk": ["maybe"]})
        with pytest.raises(pandera.errors.SchemaError):
            schema.validate(bad)
