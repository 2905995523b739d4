"""
Schema definitions using Pandera for data validation.

Data contracts at the pipeline boundaries: the loaded dataset and the
scored output tables.
"""

from pcacredit.schemas.credit import build_dataset_schema
from pcacredit.schemas.output import ScoredPredictionSchema, SweepResultSchema

__all__ = [
    "ScoredPredictionSchema",
    "SweepResultSchema",
    "build_dataset_schema",
]
