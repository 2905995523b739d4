"""Command-line interface for the pcacredit pipeline."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

app = typer.Typer(
    name="pcacredit",
    help="PCA feature reduction and weighted logistic regression for credit risk.",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit log events as JSON lines."),
    ] = False,
) -> None:
    """Configure logging for every command."""
    from pcacredit.utils.logging import configure_logging

    configure_logging(level=log_level, json_output=json_logs)


@app.command()
def run(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration YAML file.",
            exists=True,
            dir_okay=False,
        ),
    ],
    data: Annotated[
        Path | None,
        typer.Option("--data", "-d", help="Override the dataset CSV path."),
    ] = None,
    components: Annotated[
        int | None,
        typer.Option("--components", "-k", help="Number of retained components."),
    ] = None,
    plots: Annotated[
        bool,
        typer.Option("--plots/--no-plots", help="Write scree and ROC plots."),
    ] = True,
) -> None:
    """Run the full pipeline and print variance, confusion matrix and metrics."""
    import pandera.errors
    from pydantic import ValidationError

    from pcacredit.config.loader import load_config
    from pcacredit.errors import PipelineError
    from pcacredit.evaluation.report import (
        plot_roc_curve,
        plot_scree,
        print_coefficients_table,
        print_confusion_matrix,
        print_metrics_table,
        print_variance_table,
        save_scored_predictions,
        scored_frame,
    )
    from pcacredit.pipeline import run_pipeline

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        pipeline_config = load_config(config)
        if components is not None:
            pipeline_config = pipeline_config.with_overrides(
                pca={"n_components": components}
            )
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    data_cfg = pipeline_config.data
    console.print(f"[dim]Dataset: {data or data_cfg.path}[/dim]")
    console.print(
        f"[dim]Components: {pipeline_config.pca.n_components or 'all'}, "
        f"threshold: {pipeline_config.evaluation.threshold}[/dim]"
    )

    try:
        result = run_pipeline(pipeline_config, data_path=data)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except (PipelineError, pandera.errors.SchemaError, ValueError) as e:
        console.print(f"[red]Pipeline failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    print_variance_table(result.features.pca_model, console)
    print_coefficients_table(result.classifier, console)
    print_confusion_matrix(
        result.metrics,
        console,
        positive_label=data_cfg.positive_label,
        negative_label=data_cfg.negative_label,
    )
    print_metrics_table(result.metrics, console)

    written: list[Path] = []
    if plots and pipeline_config.output.save_plots:
        written.append(
            plot_scree(
                result.features.pca_model, pipeline_config.plots_dir / "scree.png"
            )
        )
        written.append(plot_roc_curve(result.roc, pipeline_config.plots_dir / "roc.png"))

    if pipeline_config.output.save_predictions:
        scored = scored_frame(
            result.features.test.y,
            result.test_probabilities,
            result.test_predicted,
            scores=result.features.test.X,
        )
        written.append(
            save_scored_predictions(
                scored,
                pipeline_config.predictions_dir,
                project=pipeline_config.project,
            )
        )

    for path in written:
        console.print(f"[green]Saved: {path}[/green]")

    if pipeline_config.mlflow.enabled:
        from pcacredit.evaluation.tracking import RunTracker

        run_id = RunTracker(pipeline_config).log_result(result, artifacts=written)
        console.print(f"[dim]MLflow run: {run_id}[/dim]")


@app.command()
def demo(
    samples: Annotated[
        int,
        typer.Option("--samples", "-n", help="Number of bivariate normal draws."),
    ] = 100,
    seed: Annotated[
        int,
        typer.Option("--seed", "-s", help="Random seed."),
    ] = 1337,
    plots: Annotated[
        Path | None,
        typer.Option("--plots", "-p", help="Directory for the scatter and scree plots."),
    ] = None,
) -> None:
    """PCA on a correlated bivariate normal sample (cov [[1, 0.6], [0.6, 1]])."""
    from pcacredit.evaluation.report import (
        plot_pca_scatter,
        plot_scree,
        print_variance_table,
    )
    from pcacredit.synthetic import run_synthetic_demo

    try:
        result = run_synthetic_demo(samples, random_state=seed)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    print_variance_table(result.model, console)
    console.print(result.model.loadings.round(4).to_string())

    if plots is not None:
        for path in (
            plot_pca_scatter(
                result.sample,
                result.scores,
                plots / "synthetic_scatter.png",
                components=result.model.components,
            ),
            plot_scree(result.model, plots / "synthetic_scree.png"),
        ):
            console.print(f"[green]Saved: {path}[/green]")


@app.command()
def sweep(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration YAML file.",
            exists=True,
            dir_okay=False,
        ),
    ],
    max_components: Annotated[
        int | None,
        typer.Option("--max-components", "-k", help="Largest component count."),
    ] = None,
    data: Annotated[
        Path | None,
        typer.Option("--data", "-d", help="Override the dataset CSV path."),
    ] = None,
) -> None:
    """Evaluate accuracy, F1 and AUC for k = 1..max-components."""
    import pandera.errors

    from pcacredit.config.loader import load_config
    from pcacredit.errors import PipelineError
    from pcacredit.evaluation.report import print_sweep_table
    from pcacredit.modeling.data import load_dataset
    from pcacredit.pipeline import sweep_components

    try:
        pipeline_config = load_config(config)
        dataset = load_dataset(data or pipeline_config.data.path, pipeline_config.data)
        results = sweep_components(dataset, pipeline_config, max_components)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except (PipelineError, pandera.errors.SchemaError, ValueError) as e:
        console.print(f"[red]Sweep failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    print_sweep_table(results, console)


@app.command()
def version() -> None:
    """Show version information."""
    from pcacredit import __version__

    console.print(f"pcacredit version {__version__}")


if __name__ == "__main__":
    app()
