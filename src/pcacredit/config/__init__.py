"""
Configuration management with typed Pydantic models.

Provides YAML loading with environment interpolation and
frozen, validated settings for every pipeline stage.
"""

from pcacredit.config.loader import load_config
from pcacredit.config.settings import (
    ClassifierConfig,
    DataConfig,
    EncodingConfig,
    EvaluationConfig,
    MLflowConfig,
    OutputConfig,
    PCAConfig,
    PipelineConfig,
    SplitConfig,
    UnknownCategoryPolicy,
)

__all__ = [
    "ClassifierConfig",
    "DataConfig",
    "EncodingConfig",
    "EvaluationConfig",
    "MLflowConfig",
    "OutputConfig",
    "PCAConfig",
    "PipelineConfig",
    "SplitConfig",
    "UnknownCategoryPolicy",
    "load_config",
]
