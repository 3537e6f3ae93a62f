"""Command-line interface for extractflow."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from extractflow import __version__
from extractflow.cli.output import (
    display_episodes,
    display_extraction,
    display_languages,
    display_templates,
    display_translations,
    print_notification,
)
from extractflow.core.config import Config, load_config
from extractflow.core.cost import estimate_translation_cost
from extractflow.core.errors import ExtractflowError
from extractflow.core.formatting import format_cost
from extractflow.core.models import AIProvider, SourceInput, SourceType
from extractflow.core.notify import Notification, Notifier
from extractflow.core.progress import ProgressReporter, ProgressUpdate
from extractflow.core.session import ReviewSession, SessionState
from extractflow.services.extraction import ExtractionOrchestrator
from extractflow.services.review import ReviewService
from extractflow.services.store import ContentStore

console = Console()
error_console = Console(stderr=True)

logger = logging.getLogger("extractflow.cli")

PROVIDER_CHOICES = [p.value for p in AIProvider]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _notify(notification: Notification) -> None:
    print_notification(notification, console)


def _log_progress(update: ProgressUpdate) -> None:
    logger.debug("[%3d%%] %s", update.percent, update.stage)


def parse_edit(value: str) -> tuple[str, str, str]:
    """Split ``LANG.FIELD=VALUE`` into its parts."""
    target, sep, text = value.partition("=")
    language, dot, field = target.partition(".")
    if not sep or not dot or not language or not field:
        raise click.BadParameter(f"Expected LANG.FIELD=VALUE, got '{value}'", param_hint="--edit")
    return language.strip(), field.strip(), text


@click.group()
@click.version_option(version=__version__, prog_name="extractflow")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: .extractflow/config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Extractflow - AI content extraction and translation review.

    Extract structured episode fields from text, files or URLs, translate
    them into other languages, review the results and apply them to an
    episode.
    """
    _configure_logging(verbose)
    try:
        ctx.obj = load_config(local_path=config_path)
    except ExtractflowError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--text", "text", help="Content to extract from")
@click.option(
    "--file",
    "file_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to extract from (.txt, .md, .pdf, .docx)",
)
@click.option("--url", "url", help="URL to extract from (sent as-is, not fetched)")
@click.option("--provider", type=click.Choice(PROVIDER_CHOICES), help="AI provider")
@click.option("--template", "template_id", help="Extraction template ID (default: auto-detect)")
@click.option("--episode", "episode_id", help="Episode ID to extract for and apply to")
@click.option(
    "--language",
    "-l",
    "languages",
    multiple=True,
    help="Language to translate into; repeat for several",
)
@click.option("--source-language", help="Language of the source content")
@click.option(
    "--edit",
    "edits",
    multiple=True,
    help="Edit a translated field and save it: LANG.FIELD=VALUE",
)
@click.option("--apply", "apply_", is_flag=True, help="Apply the results to the episode")
@click.pass_obj
def extract(
    config: Config,
    text: str | None,
    file_path: Path | None,
    url: str | None,
    provider: str | None,
    template_id: str | None,
    episode_id: str | None,
    languages: tuple[str, ...],
    source_language: str | None,
    edits: tuple[str, ...],
    apply_: bool,
) -> None:
    """Extract content, optionally translate, edit and apply it.

    Example: extractflow extract --file transcript.txt -l en -l fr --episode 42 --apply
    """
    given = [v for v in (text, file_path, url) if v is not None]
    if len(given) != 1:
        raise click.UsageError("Provide exactly one of --text, --file or --url")

    if text is not None:
        source = SourceInput(SourceType.TEXT, text)
    elif file_path is not None:
        source = SourceInput(SourceType.FILE, str(file_path))
    else:
        source = SourceInput(SourceType.URL, url or "")

    parsed_edits = [parse_edit(e) for e in edits]

    try:
        ok = asyncio.run(
            _extract_flow(
                config,
                source,
                provider=AIProvider(provider) if provider else None,
                template_id=template_id,
                episode_id=episode_id,
                languages=list(languages),
                source_language=source_language,
                edits=parsed_edits,
                apply_=apply_,
            )
        )
    except ExtractflowError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not ok:
        sys.exit(1)


async def _extract_flow(
    config: Config,
    source: SourceInput,
    provider: AIProvider | None,
    template_id: str | None,
    episode_id: str | None,
    languages: list[str],
    source_language: str | None,
    edits: list[tuple[str, str, str]],
    apply_: bool,
) -> bool:
    notifier = Notifier(handler=_notify)
    session = ReviewSession(
        selected_languages=languages or config.translation.target_languages,
        source_language=source_language or config.translation.source_language,
        episode_id=episode_id,
    )
    orchestrator = ExtractionOrchestrator(
        config,
        notifier=notifier,
        progress=ProgressReporter(callback=_log_progress),
        session=session,
    )

    if template_id is None and source.source_type == SourceType.FILE:
        suggested = orchestrator.suggest_template(
            Path(source.value).name, await orchestrator.load_templates()
        )
        if suggested is not None:
            console.print(f"Using suggested template [cyan]{suggested.name}[/cyan]")
            template_id = suggested.id

    result = await orchestrator.extract(
        source,
        template_id=template_id,
        episode_id=episode_id,
        ai_provider=provider,
    )
    display_extraction(result, console)

    # Explicit languages translate even when automatic translation is off
    if languages and session.state == SessionState.EXTRACTED and not notifier.errors:
        targets = session.target_languages()
        if targets:
            await orchestrator.translator.translate(
                result.extraction_id,
                targets,
                session.effective_source_language(),
                ai_provider=provider,
            )
    if notifier.errors:
        return False

    ok = True
    review = ReviewService(config, session, store=orchestrator.store, notifier=notifier)
    for language, field, value in edits:
        session.on_field_edit(language, field, value)
        ok = await review.save_translation(language) and ok

    display_translations(session.translation_results, console)

    if apply_:
        report = await review.apply_to_episode()
        if report is None:
            click.echo(
                "Error: Nothing to apply. Select an existing episode and resolve "
                "validation errors first.",
                err=True,
            )
            return False
        ok = ok and report.complete

    return ok


@main.command()
@click.pass_obj
def languages(config: Config) -> None:
    """List the active languages."""
    try:
        result = asyncio.run(ContentStore(config).list_languages())
    except ExtractflowError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    display_languages(result, console)


@main.command()
@click.pass_obj
def templates(config: Config) -> None:
    """List extraction templates, most used first."""
    try:
        result = asyncio.run(ExtractionOrchestrator(config).load_templates())
    except ExtractflowError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    display_templates(result, console)


@main.command()
@click.option(
    "--limit", "-n",
    default=50,
    type=int,
    help="Maximum number of episodes to display (default: 50)",
)
@click.pass_obj
def episodes(config: Config, limit: int) -> None:
    """List recent episodes that extractions can be applied to."""
    try:
        result = asyncio.run(ExtractionOrchestrator(config).load_episodes(limit=limit))
    except ExtractflowError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    display_episodes(result, console)


@main.command("estimate-cost")
@click.argument("content_length", type=click.IntRange(min=0))
@click.argument("language_count", type=click.IntRange(min=0))
@click.option(
    "--provider",
    type=click.Choice(PROVIDER_CHOICES),
    default="openai",
    help="AI provider (default: openai)",
)
def estimate_cost(content_length: int, language_count: int, provider: str) -> None:
    """Estimate the cost of translating content into N languages.

    Example: extractflow estimate-cost 12000 3 --provider claude
    """
    cost = estimate_translation_cost(content_length, language_count, provider)
    click.echo(f"Estimated cost: {format_cost(cost)}")


if __name__ == "__main__":
    main()
