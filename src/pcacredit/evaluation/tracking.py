"""
MLflow run tracking.

Off by default; enabled with ``mlflow.enabled: true``. One pipeline run
becomes one MLflow run carrying the configuration as parameters and the
test metrics as metrics.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import mlflow

from pcacredit.config.settings import PipelineConfig
from pcacredit.utils.logging import get_logger

if TYPE_CHECKING:
    from pcacredit.pipeline import PipelineResult

log = get_logger(__name__)


def flatten_params(config: PipelineConfig) -> dict[str, Any]:
    """Configuration as flat ``section.field`` parameters."""
    params: dict[str, Any] = {"project": config.project}
    for section in ("data", "split", "encoding", "pca", "classifier", "evaluation"):
        for key, value in getattr(config, section).model_dump(mode="json").items():
            params[f"{section}.{key}"] = value
    return params


class RunTracker:
    """Logs pipeline runs to an MLflow experiment."""

    def __init__(self, config: PipelineConfig) -> None:
        """
        Initialize tracker.

        Args:
            config: Pipeline configuration (tracking URI, experiment name).
        """
        self.config = config
        self._run_id: str | None = None

    def setup(self) -> None:
        """Point MLflow at the configured server and experiment."""
        mlflow.set_tracking_uri(self.config.mlflow.tracking_uri)
        mlflow.set_experiment(self.config.experiment_name)
        log.info(
            "Experiment setup",
            name=self.config.experiment_name,
            tracking_uri=self.config.mlflow.tracking_uri,
        )

    def log_result(
        self,
        result: "PipelineResult",
        artifacts: list[Path] | None = None,
    ) -> str:
        """
        Log one pipeline result as an MLflow run.

        Args:
            result: Completed pipeline result.
            artifacts: Files (plots, scored CSV) to attach.

        Returns:
            Run ID.
        """
        self.setup()
        run_name = f"{self.config.project}-{datetime.now():%Y%m%d-%H%M%S}"

        with mlflow.start_run(run_name=run_name) as run:
            self._run_id = run.info.run_id
            mlflow.log_params(flatten_params(self.config))
            mlflow.log_metrics(
                {
                    k: float(v)
                    for k, v in result.metrics.to_dict().items()
                    if not math.isnan(float(v))
                }
            )
            mlflow.log_metric(
                "retained_variance",
                float(result.features.pca_model.cumulative_variance[-1]),
            )
            for path in artifacts or []:
                mlflow.log_artifact(str(path))

        log.info("Logged MLflow run", run_id=self._run_id)
        return self._run_id
