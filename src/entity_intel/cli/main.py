"""
Main CLI application for Entity Intelligence.

Provides the command-line interface for:
- Analyzing a live page by URL
- Analyzing pasted content from a file or stdin
- Managing configuration
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from entity_intel import __version__
from entity_intel.config import Settings, get_default_config_path, load_config
from entity_intel.config.loader import CONFIG_FILE_NAME
from entity_intel.core.exceptions import (
    ConfigurationError,
    ContentFetchError,
    InputValidationError,
)
from entity_intel.pipeline import AnalysisPipeline, PipelineResult
from entity_intel.topics.resolver import STRATEGIES
from entity_intel.utils.logging import setup_logging, get_logger

# Initialize Typer app
app = typer.Typer(
    name="entity-intel",
    help="Entity Intelligence - knowledge-graph entities, main topic and salience for web pages",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = get_logger(__name__)

EXIT_FETCH_FAILED = 1
EXIT_INVALID_INPUT = 2


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(
            f"[bold blue]Entity Intelligence[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Entity Intelligence - find what a page is about in knowledge-graph terms.

    Use 'entity-intel --help' for command list.
    """
    log_level = "DEBUG" if verbose else "INFO"
    setup_logging(level=log_level)


def build_pipeline(settings: Settings) -> AnalysisPipeline:
    """Create the pipeline for a command run."""
    return AnalysisPipeline.from_settings(settings)


def _validate_strategy(strategy: Optional[str]) -> Optional[str]:
    if strategy is not None and strategy not in STRATEGIES:
        raise typer.BadParameter(
            f"must be one of: {', '.join(STRATEGIES)}", param_hint="--strategy")
    return strategy


STRATEGY_OPTION_HELP = f"Main-topic strategy ({', '.join(STRATEGIES)})"


@app.command()
def analyze(
    url: str = typer.Argument(
        ...,
        help="URL of the page to analyze",
    ),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help=STRATEGY_OPTION_HELP,
        callback=_validate_strategy,
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the JSON result to this file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Fetch a page and analyze its entities.

    Example:
        entity-intel analyze https://example.com/seo-course --strategy title
    """
    _run_analysis(
        lambda pipeline: pipeline.analyze_url(url, strategy=strategy),
        as_json=as_json,
        output=output,
        config_file=config_file,
    )


@app.command("analyze-text")
def analyze_text(
    source: str = typer.Argument(
        ...,
        help="File with pasted markup or text, or '-' for stdin",
    ),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help=STRATEGY_OPTION_HELP,
        callback=_validate_strategy,
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the JSON result to this file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Analyze pasted content instead of a live page.

    Example:
        entity-intel analyze-text article.html --json
    """
    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.is_file():
            console.print(f"[red]Error:[/red] File not found: {source}")
            raise typer.Exit(EXIT_INVALID_INPUT)
        text = path.read_text(encoding="utf-8", errors="replace")

    _run_analysis(
        lambda pipeline: pipeline.analyze_content(text, strategy=strategy),
        as_json=as_json,
        output=output,
        config_file=config_file,
    )


def _run_analysis(
    run,
    as_json: bool,
    output: Optional[Path],
    config_file: Optional[Path],
) -> None:
    """Load settings, run the pipeline and report the result."""
    try:
        settings = load_config(config_file or get_default_config_path())
    except (ConfigurationError, ValidationError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_INVALID_INPUT)

    try:
        with build_pipeline(settings) as pipeline:
            result = run(pipeline)
    except InputValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e.message}")
        raise typer.Exit(EXIT_INVALID_INPUT)
    except ContentFetchError as e:
        console.print(f"[red]Could not retrieve content:[/red] {e.message}")
        raise typer.Exit(EXIT_FETCH_FAILED)

    payload = result.to_dict()

    if output:
        output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]✓[/green] Result saved to: {output}")

    if as_json:
        console.print_json(json.dumps(payload, ensure_ascii=False))
    else:
        _show_result(result)


def _show_result(result: PipelineResult) -> None:
    """Render a result summary."""
    source = result.source
    console.print(Panel(
        f"[bold]Source:[/bold] {source}\n"
        f"[bold]Title:[/bold] {result.title or '-'}\n"
        f"[bold]Main topic:[/bold] {result.main_topic or '-'} "
        f"[dim](confidence {result.main_topic_confidence}, {result.main_topic_rule})[/dim]\n"
        f"[bold]Topical salience:[/bold] {result.topical_salience}/100\n"
        f"[dim]Entities: {result.entities_count} | Enriched: {result.enriched_count} | "
        f"Extraction: {result.extraction_method} | "
        f"Time: {result.processing_time_seconds:.1f}s[/dim]",
        title="Entity Intelligence",
        border_style="blue",
    ))

    if result.entities:
        table = Table(title="Entities")
        table.add_column("Entity", style="cyan")
        table.add_column("Confidence", justify="right")
        table.add_column("Type")
        table.add_column("Sources")

        irrelevant = set(result.irrelevant_entities)
        for entity in result.entities:
            sources = []
            if entity.wikipedia_url:
                sources.append("Wikipedia")
            if entity.wikidata_url:
                sources.append("Wikidata")
            if entity.has_knowledge_graph_match:
                sources.append("Knowledge Graph")
            if entity.product_ontology_url:
                sources.append("ProductOntology")
            name = f"{entity.name} [dim](weak)[/dim]" if entity.name in irrelevant else entity.name
            table.add_row(
                name,
                str(entity.confidence_score),
                entity.type or "-",
                ", ".join(sources) or "-",
            )
        console.print(table)

    if result.salience_tips:
        console.print("\n[bold]Salience tips[/bold]")
        for tip in result.salience_tips:
            console.print(f"  • {tip}")

    if result.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for recommendation in result.recommendations:
            console.print(f"  • [cyan]{recommendation.category}:[/cyan] {recommendation.advice}")


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file to show",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Configuration management.

    View or initialize configuration files.

    Examples:
        entity-intel config --show
        entity-intel config --init --output ./entity-intel.yaml
    """
    if init:
        _init_config(output)
    elif show:
        _show_config(config_file)
    else:
        console.print(
            "Use --show to view config or --init to create default config")


def _show_config(config_file: Optional[Path]) -> None:
    """Show current configuration."""
    settings = load_config(config_file or get_default_config_path())
    config_dict = settings.model_dump(mode="json")

    console.print(Panel(
        "[bold]Current Configuration[/bold]",
        border_style="blue",
    ))

    for section, values in config_dict.items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: [dim]{value}[/dim]")
        else:
            console.print(f"  {values}")


def _init_config(output: Optional[Path]) -> None:
    """Create default configuration file."""
    import yaml

    config_dict = Settings().model_dump(mode="json")
    output_path = output or Path(CONFIG_FILE_NAME)

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")


if __name__ == "__main__":
    app()
