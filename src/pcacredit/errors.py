"""
Pipeline error types.

Every condition that aborts a run is a PipelineError. They subclass
ValueError because each one describes input the pipeline cannot use.
"""


class PipelineError(ValueError):
    """Base class for all pipeline failures."""


class LabelError(PipelineError):
    """Label column contains values outside the configured class pair."""


class ZeroVarianceError(PipelineError):
    """One or more training columns are constant, so scaling is undefined."""

    def __init__(self, columns: list[str]) -> None:
        self.columns = columns
        super().__init__(
            f"Zero training variance in column(s): {', '.join(columns)}"
        )


class UnknownCategoryError(PipelineError):
    """A categorical level was not observed when the encoding was fitted."""

    def __init__(self, column: str, levels: list[str]) -> None:
        self.column = column
        self.levels = levels
        super().__init__(
            f"Unknown level(s) in column '{column}': {', '.join(map(repr, levels))}"
        )


class DegenerateMetricError(PipelineError):
    """A metric denominator is zero (e.g. no predicted positives)."""

    def __init__(self, metric: str) -> None:
        self.metric = metric
        super().__init__(f"{metric} is undefined: denominator is zero")
