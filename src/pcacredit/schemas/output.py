"""
Pandera schemas for pipeline output data.
"""

import pandera.pandas as pa
from pandera.typing import Series


class ScoredPredictionSchema(pa.DataFrameModel):
    """
    Schema for the scored test set.

    One row per test case with the observed label, the model's probability
    of the negative class and the thresholded prediction.
    """

    actual: Series[str] = pa.Field(description="Observed label")
    probability: Series[float] = pa.Field(
        ge=0.0,
        le=1.0,
        description="Predicted probability of the negative (good) class",
    )
    predicted: Series[str] = pa.Field(description="Thresholded label")

    class Config:
        """Schema configuration."""

        name = "ScoredPredictionSchema"
        strict = False  # Allow extra columns such as component scores
        coerce = True


class SweepResultSchema(pa.DataFrameModel):
    """Schema for the component sweep table."""

    n_components: Series[int] = pa.Field(ge=1)
    cumulative_variance: Series[float] = pa.Field(ge=0.0, le=1.0 + 1e-9)
    accuracy: Series[float] = pa.Field(ge=0.0, le=1.0)
    f1: Series[float] = pa.Field(nullable=True)
    auc: Series[float] = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "SweepResultSchema"
        strict = True
        coerce = True
