"""
End-to-end credit-risk pipeline.

DataLoader -> Encoder -> Scaler -> PCAReducer -> Classifier -> Evaluator.
Each stage returns a new immutable artifact; nothing is shared between
runs and no stage reads state another stage left behind.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from pcacredit.config.settings import PipelineConfig
from pcacredit.evaluation.metrics import ClassificationMetrics, Evaluator, RocCurve
from pcacredit.modeling.classifier import Classifier, ClassifierModel
from pcacredit.modeling.data import (
    Dataset,
    DatasetSplit,
    FeatureMatrix,
    load_dataset,
    split_dataset,
)
from pcacredit.modeling.encoding import Encoder, EncodingScheme
from pcacredit.modeling.pca import PCAModel, PCAReducer
from pcacredit.modeling.scaling import Scaler, ScalingParameters
from pcacredit.schemas.output import SweepResultSchema
from pcacredit.utils.logging import get_logger, log_context, log_stage

log = get_logger(__name__)


@dataclass(frozen=True)
class FeatureArtifacts:
    """
    Fitted feature stages and the matrices they produced.

    Attributes:
        scheme: Dummy encoding fitted on train.
        scaling: Mean/std fitted on the encoded train matrix.
        pca_model: Components fitted on the scaled train matrix.
        train_scaled: Scaled training matrix (input to PCA).
        test_scaled: Scaled test matrix.
        train: Projected training matrix.
        test: Projected test matrix.
    """

    scheme: EncodingScheme
    scaling: ScalingParameters
    pca_model: PCAModel
    train_scaled: FeatureMatrix
    test_scaled: FeatureMatrix
    train: FeatureMatrix
    test: FeatureMatrix


@dataclass(frozen=True)
class PipelineResult:
    """Every artifact of one pipeline run."""

    config: PipelineConfig
    split: DatasetSplit
    features: FeatureArtifacts
    classifier: ClassifierModel
    test_probabilities: np.ndarray
    test_predicted: np.ndarray
    metrics: ClassificationMetrics
    roc: RocCurve


def fit_transform_features(
    split: DatasetSplit,
    config: PipelineConfig,
    *,
    n_components: int | None = None,
) -> FeatureArtifacts:
    """
    Fit encoder, scaler and PCA on train and apply them to both partitions.

    Args:
        split: Train/test partitions.
        config: Pipeline configuration.
        n_components: Overrides ``config.pca.n_components`` when given.

    Returns:
        FeatureArtifacts.
    """
    with log_stage("encode"):
        scheme = Encoder(config.encoding).fit(split.train)
        train_encoded = scheme.transform(split.train)
        test_encoded = scheme.transform(split.test)

    with log_stage("scale"):
        scaling = Scaler().fit(train_encoded)
        train_scaled = scaling.transform(train_encoded)
        test_scaled = scaling.transform(test_encoded)

    k = n_components if n_components is not None else config.pca.n_components
    with log_stage("pca", n_components=k):
        pca_model = PCAReducer(config.pca).fit(train_scaled.X, k)
        train_projected = pca_model.transform(train_scaled)
        test_projected = pca_model.transform(test_scaled)

    return FeatureArtifacts(
        scheme=scheme,
        scaling=scaling,
        pca_model=pca_model,
        train_scaled=train_scaled,
        test_scaled=test_scaled,
        train=train_projected,
        test=test_projected,
    )


def run_pipeline_on_dataset(dataset: Dataset, config: PipelineConfig) -> PipelineResult:
    """
    Run split, feature stages, classifier and evaluation on a loaded dataset.

    Args:
        dataset: Prepared dataset.
        config: Pipeline configuration.

    Returns:
        PipelineResult.
    """
    data_cfg = config.data
    with log_context(project=config.project):
        split = split_dataset(dataset, config.split)
        features = fit_transform_features(split, config)

        with log_stage("classify"):
            classifier = Classifier(
                config.classifier,
                positive_label=data_cfg.positive_label,
                negative_label=data_cfg.negative_label,
            ).fit(features.train)

        evaluator = Evaluator(
            config.evaluation,
            positive_label=data_cfg.positive_label,
            negative_label=data_cfg.negative_label,
        )
        probabilities = classifier.predict(features.test.X)
        actual = features.test.y.to_numpy()
        roc = evaluator.roc(actual, probabilities)
        metrics = evaluator.evaluate(actual, probabilities, roc=roc)

        log.info(
            "Pipeline complete",
            n_components=features.pca_model.n_components,
            accuracy=round(metrics.accuracy, 4),
            f1=round(metrics.f1, 4),
            auc=round(metrics.auc, 4),
        )

    return PipelineResult(
        config=config,
        split=split,
        features=features,
        classifier=classifier,
        test_probabilities=probabilities,
        test_predicted=evaluator.classify(probabilities),
        metrics=metrics,
        roc=roc,
    )


def run_pipeline(
    config: PipelineConfig,
    *,
    data_path: Path | None = None,
) -> PipelineResult:
    """
    Load the configured dataset and run the full pipeline.

    Args:
        config: Pipeline configuration.
        data_path: Overrides ``config.data.path`` when given.

    Returns:
        PipelineResult.
    """
    path = data_path if data_path is not None else config.data.path
    dataset = load_dataset(path, config.data)
    return run_pipeline_on_dataset(dataset, config)


def sweep_components(
    dataset: Dataset,
    config: PipelineConfig,
    max_components: int | None = None,
) -> pd.DataFrame:
    """
    Evaluate the classifier for every component count 1..max_components.

    Encoding and scaling are fitted once; PCA and the classifier are refit
    for each k on the same split.

    Args:
        dataset: Prepared dataset.
        config: Pipeline configuration.
        max_components: Largest k (defaults to the encoded feature count).

    Returns:
        DataFrame with n_components, cumulative_variance, accuracy, f1, auc.
    """
    data_cfg = config.data
    split = split_dataset(dataset, config.split)
    base = fit_transform_features(split, config, n_components=1)
    n_features = base.train_scaled.n_features
    upper = n_features if max_components is None else min(max_components, n_features)

    classifier = Classifier(
        config.classifier,
        positive_label=data_cfg.positive_label,
        negative_label=data_cfg.negative_label,
    )
    evaluator = Evaluator(
        config.evaluation,
        positive_label=data_cfg.positive_label,
        negative_label=data_cfg.negative_label,
    )
    reducer = PCAReducer(config.pca)

    rows = []
    for k in range(1, upper + 1):
        pca_model = reducer.fit(base.train_scaled.X, k)
        model = classifier.fit(pca_model.transform(base.train_scaled))
        test = pca_model.transform(base.test_scaled)
        metrics = evaluator.evaluate(test.y.to_numpy(), model.predict(test.X))
        rows.append(
            {
                "n_components": k,
                "cumulative_variance": float(pca_model.cumulative_variance[-1]),
                "accuracy": metrics.accuracy,
                "f1": metrics.f1,
                "auc": metrics.auc,
            }
        )
        log.debug("Sweep step", n_components=k, accuracy=metrics.accuracy)

    results = SweepResultSchema.validate(pd.DataFrame(rows))
    log.info("Component sweep complete", max_components=upper)
    return results
