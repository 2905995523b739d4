"""
Pandera schema for the loaded credit dataset.

The column layout depends on configuration (label name, categorical
predictors), so the schema is built at load time instead of declared as a
DataFrameModel.
"""

import pandera.pandas as pa

from pcacredit.config.settings import DataConfig


def build_dataset_schema(
    data_config: DataConfig,
    *,
    numeric_columns: list[str],
    categorical_columns: list[str],
) -> pa.DataFrameSchema:
    """
    Build the schema for a loaded, label-recoded dataset.

    Args:
        data_config: Dataset layout configuration.
        numeric_columns: Numeric predictor names.
        categorical_columns: Categorical predictor names.

    Returns:
        DataFrameSchema enforcing label values and predictor dtypes.
    """
    columns: dict[str, pa.Column] = {
        data_config.label_column: pa.Column(
            str,
            checks=pa.Check.isin(
                [data_config.positive_label, data_config.negative_label]
            ),
            nullable=False,
            description="Recoded binary label",
        ),
    }
    for col in numeric_columns:
        columns[col] = pa.Column(float, nullable=False, coerce=True)
    for col in categorical_columns:
        columns[col] = pa.Column(str, nullable=False, coerce=True)

    return pa.DataFrameSchema(
        columns,
        name="CreditDatasetSchema",
        strict=True,  # the identifier column must already be gone
        ordered=False,
    )
