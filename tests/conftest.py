"""Pytest configuration and shared fixtures."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from pcacredit.config.settings import PipelineConfig
from pcacredit.pipeline import PipelineResult, run_pipeline

CHECKING_LEVELS = ["little", "moderate", "rich"]
SAVING_LEVELS = ["little", "moderate", "quite rich", "rich"]
PURPOSE_LEVELS = ["car", "radio/TV", "furniture/equipment", "business", "education"]
HOUSING_LEVELS = ["own", "rent", "free"]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def credit_frame() -> pd.DataFrame:
    """
    Credit data in the layout of the Kaggle German credit file.

    Long, large loans and a low checking balance make bad risk likely, so a
    classifier on the leading components has real signal to find.
    """
    rng = np.random.default_rng(42)
    n = 1000

    duration = rng.gamma(shape=4.0, scale=5.0, size=n).round().clip(4, 72)
    amount = (duration * 150 * rng.lognormal(0.0, 0.35, size=n)).round()
    age = rng.integers(19, 75, size=n)
    job = rng.integers(0, 4, size=n)
    checking = rng.choice(CHECKING_LEVELS + [None], size=n, p=[0.3, 0.25, 0.05, 0.4])
    saving = rng.choice(SAVING_LEVELS + [None], size=n, p=[0.6, 0.1, 0.06, 0.06, 0.18])
    purpose = rng.choice(PURPOSE_LEVELS, size=n)
    housing = rng.choice(HOUSING_LEVELS, size=n, p=[0.7, 0.2, 0.1])
    sex = rng.choice(["male", "female"], size=n, p=[0.7, 0.3])

    z_duration = (duration - duration.mean()) / duration.std()
    z_amount = (np.log(amount) - np.log(amount).mean()) / np.log(amount).std()
    logit = (
        -1.3
        + 1.6 * z_duration
        + 0.8 * z_amount
        + 1.2 * (checking == "little")
        - 0.8 * pd.isna(checking)
        - 0.02 * (age - 35)
    )
    bad = rng.random(n) < 1.0 / (1.0 + np.exp(-logit))

    return pd.DataFrame(
        {
            "Unnamed: 0": np.arange(n),
            "Age": age,
            "Sex": sex,
            "Job": job,
            "Housing": housing,
            "Saving accounts": saving,
            "Checking account": checking,
            "Credit amount": amount,
            "Duration": duration.astype(int),
            "Purpose": purpose,
            "Risk": np.where(bad, "bad", "good"),
        }
    )


@pytest.fixture
def credit_csv(tmp_path: Path, credit_frame: pd.DataFrame) -> Path:
    """The credit frame written to a CSV file."""
    path = tmp_path / "german_credit_data.csv"
    credit_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def pipeline_config(tmp_path: Path, credit_csv: Path) -> PipelineConfig:
    """Default pipeline configuration pointing at the fixture CSV."""
    return PipelineConfig.model_validate(
        {
            "project": "test-credit",
            "data": {"path": credit_csv},
            "output": {"output_root": tmp_path / "output"},
        }
    )


@pytest.fixture
def correlated_matrix() -> pd.DataFrame:
    """Standardised four-column matrix with two correlated pairs."""
    rng = np.random.default_rng(7)
    base = rng.normal(size=(300, 2))
    noise = rng.normal(scale=0.5, size=(300, 4))
    values = np.column_stack(
        [base[:, 0], base[:, 0], base[:, 1], base[:, 1]]
    ) + noise
    values = (values - values.mean(axis=0)) / values.std(axis=0)
    return pd.DataFrame(values, columns=["a", "b", "c", "d"])


@pytest.fixture
def pipeline_result(pipeline_config: PipelineConfig) -> PipelineResult:
    """Full pipeline run on the fixture CSV with default settings."""
    return run_pipeline(pipeline_config)
