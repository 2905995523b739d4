"""
Typed configuration models using Pydantic.

Every tunable constant of the pipeline lives here with explicit typing and
validation. Processing code receives these models and never reads YAML or
environment variables directly.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class UnknownCategoryPolicy(str, Enum):
    """What the encoder does with levels never seen in training."""

    IGNORE = "ignore"  # all-zero indicator block
    ERROR = "error"  # raise UnknownCategoryError


class DataConfig(BaseModel):
    """Input dataset layout."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(
        default=Path("data/german_credit_data.csv"),
        description="Path to the credit CSV file",
    )
    id_column: str | None = Field(
        default="Unnamed: 0",
        description="Identifier column dropped after loading (None keeps all)",
    )
    label_column: str = Field(default="Risk", description="Binary label column")
    positive_label: str = Field(default="bad", description="Positive (bad risk) class")
    negative_label: str = Field(default="good", description="Negative (good risk) class")
    label_mapping: dict[str, str] = Field(
        default_factory=dict,
        description="Raw label value -> positive/negative label (e.g. {'1': 'good'})",
    )
    categorical_columns: list[str] | None = Field(
        default=None,
        description="Categorical predictors; inferred from dtypes when unset",
    )
    missing_level: str = Field(
        default="missing",
        description="Level substituted for missing categorical values",
    )

    @model_validator(mode="after")
    def validate_labels(self) -> "DataConfig":
        """Ensure the two class labels differ and mappings target them."""
        if self.positive_label == self.negative_label:
            msg = "positive_label and negative_label must differ"
            raise ValueError(msg)
        allowed = {self.positive_label, self.negative_label}
        bad_targets = sorted(set(self.label_mapping.values()) - allowed)
        if bad_targets:
            msg = f"label_mapping targets must be one of {sorted(allowed)}, got: {bad_targets}"
            raise ValueError(msg)
        return self


class SplitConfig(BaseModel):
    """Train/test partitioning."""

    model_config = ConfigDict(frozen=True)

    test_size: float = Field(default=0.3, gt=0.0, lt=1.0)
    random_state: int = Field(default=1337)
    stratify: bool = Field(default=True, description="Stratify the split on the label")


class EncodingConfig(BaseModel):
    """Dummy encoding of categorical predictors."""

    model_config = ConfigDict(frozen=True)

    handle_unknown: UnknownCategoryPolicy = Field(default=UnknownCategoryPolicy.IGNORE)
    drop_first: bool = Field(
        default=False,
        description="Drop the first level of each column (treatment contrasts)",
    )


class PCAConfig(BaseModel):
    """Principal component reduction."""

    model_config = ConfigDict(frozen=True)

    n_components: int | None = Field(
        default=10,
        ge=1,
        description="Number of retained components (None keeps all)",
    )
    scale_by_variance: bool = Field(
        default=True,
        description="Multiply each score by its explained-variance fraction",
    )


class ClassifierConfig(BaseModel):
    """Weighted logistic regression."""

    model_config = ConfigDict(frozen=True)

    positive_weight: float = Field(default=0.66, gt=0.0)
    negative_weight: float = Field(default=0.34, gt=0.0)
    # Large C leaves sklearn's L2 penalty negligible (plain maximum likelihood)
    C: float = Field(default=1e6, gt=0.0)
    max_iter: int = Field(default=1000, ge=10)


class EvaluationConfig(BaseModel):
    """Thresholding and metric policy."""

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    strict_metrics: bool = Field(
        default=False,
        description="Raise DegenerateMetricError instead of reporting NaN",
    )


class MLflowConfig(BaseModel):
    """Optional MLflow experiment tracking."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False)
    tracking_uri: str = Field(default="http://127.0.0.1:5000")
    experiment_name: str | None = Field(
        default=None, description="MLflow experiment name (defaults to project name)"
    )


class OutputConfig(BaseModel):
    """
    Output paths configuration.

    Structure: ./output/{project}/plots and ./output/{project}/predictions.
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )
    save_plots: bool = Field(default=True)
    save_predictions: bool = Field(default=True)


class PipelineConfig(BaseModel):
    """Complete pipeline configuration."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'german-credit')")

    data: DataConfig = Field(default_factory=DataConfig)
    split: SplitConfig = Field(default_factory=SplitConfig)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)
    pca: PCAConfig = Field(default_factory=PCAConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("project")
    @classmethod
    def validate_project(cls, v: str) -> str:
        """Project names become directory names, so no path separators."""
        if not v or "/" in v or "\\" in v:
            msg = f"project must be a non-empty name without path separators, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def experiment_name(self) -> str:
        """MLflow experiment name (derived from project if not set)."""
        return self.mlflow.experiment_name or self.project

    @property
    def plots_dir(self) -> Path:
        """Path to plots output directory."""
        return self.output.output_root / self.project / "plots"

    @property
    def predictions_dir(self) -> Path:
        """Path to scored predictions output directory."""
        return self.output.output_root / self.project / "predictions"

    def with_overrides(self, **sections: dict[str, Any]) -> "PipelineConfig":
        """
        Return a validated copy with individual section fields replaced.

        Example:
            config.with_overrides(pca={"n_components": 5})
        """
        data = self.model_dump()
        for section, values in sections.items():
            data[section] = {**data[section], **values}
        return PipelineConfig.model_validate(data)
