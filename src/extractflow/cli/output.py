"""CLI output formatting utilities."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extractflow.core.formatting import (
    format_cost,
    format_processing_time,
    format_quality,
    quality_tier,
)
from extractflow.core.models import (
    EpisodeSummary,
    ExtractionResult,
    ExtractionTemplate,
    FieldValue,
    Language,
    TranslationResult,
    TranslationStatus,
)
from extractflow.core.notify import Level, Notification

TIER_STYLES = {"high": "green", "medium": "yellow", "low": "red"}

STATUS_STYLES = {
    TranslationStatus.COMPLETED: "green",
    TranslationStatus.REVIEW_NEEDED: "yellow",
    TranslationStatus.APPROVED: "green",
    TranslationStatus.FAILED: "red",
}

NOTIFICATION_STYLES = {Level.SUCCESS: "green", Level.INFO: "cyan", Level.ERROR: "red"}


def _field_text(value: FieldValue) -> str:
    if isinstance(value, list):
        return ", ".join(value)
    return value


def _styled_quality(score: float) -> str:
    style = TIER_STYLES[quality_tier(score)]
    return f"[{style}]{format_quality(score)}[/{style}]"


def display_extraction(result: ExtractionResult, console: Console) -> None:
    """Display extracted fields with their confidence and the run's metrics."""
    table = Table(title=f"Extraction {result.extraction_id}")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_column("Confidence", justify="right", width=10)

    for name, value in result.extracted_fields.items():
        confidence = result.confidence_scores.get(name)
        table.add_row(
            name,
            escape(_field_text(value)),
            _styled_quality(confidence) if confidence is not None else "-",
        )

    console.print(table)
    console.print(
        f"Quality: {_styled_quality(result.quality_score)}  "
        f"Cost: {format_cost(result.cost_usd)}  "
        f"Time: {format_processing_time(result.processing_time)}"
    )
    if result.source_language:
        console.print(f"Detected language: [cyan]{result.source_language}[/cyan]")
    for error in result.validation_errors:
        console.print(f"[red]Validation error:[/red] {escape(error)}")


def display_translations(translations: dict[str, TranslationResult], console: Console) -> None:
    """Display one table per translated language."""
    for code, translation in translations.items():
        status = translation.translation_status
        style = STATUS_STYLES.get(status, "dim")
        table = Table(title=f"{code.upper()} [{style}]{status.value}[/{style}]")
        table.add_column("Field", style="bold")
        table.add_column("Value")

        for name, value in translation.translated_fields.items():
            table.add_row(name, escape(_field_text(value)))

        console.print(table)
        if translation.quality_score:
            console.print(
                f"Quality: {_styled_quality(translation.quality_score)}  "
                f"Cost: {format_cost(translation.translation_cost_usd)}"
            )
        for error in translation.validation_errors:
            console.print(f"[red]{code}:[/red] {escape(error)}")


def display_languages(languages: list[Language], console: Console) -> None:
    """Display active languages in a table."""
    if not languages:
        console.print("[yellow]No languages found.[/yellow]")
        return

    table = Table(title="Languages")
    table.add_column("Code", style="cyan", width=6)
    table.add_column("Name", style="bold")
    table.add_column("Native Name")
    table.add_column("Default", style="dim")

    for language in languages:
        name = f"{language.flag_emoji} {language.name}".strip()
        table.add_row(
            language.code,
            name,
            language.native_name or "-",
            "yes" if language.is_default else "",
        )

    console.print(table)


def display_templates(templates: list[ExtractionTemplate], console: Console) -> None:
    """Display extraction templates in a table."""
    if not templates:
        console.print("[yellow]No templates found.[/yellow]")
        return

    table = Table(title="Extraction Templates")
    table.add_column("ID", style="dim", no_wrap=True, overflow="ellipsis")
    table.add_column("Name", style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("Uses", justify="right")
    table.add_column("Success", justify="right")

    for template in templates:
        table.add_row(
            template.id,
            template.name,
            template.content_type or "-",
            str(template.usage_count),
            format_quality(template.success_rate),
        )

    console.print(table)


def display_episodes(episodes: list[EpisodeSummary], console: Console) -> None:
    """Display episodes in a table."""
    if not episodes:
        console.print("[yellow]No episodes found.[/yellow]")
        return

    table = Table(title="Episodes")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")

    for episode in episodes:
        table.add_row(episode.id, episode.title or "-")

    console.print(table)


def print_notification(notification: Notification, console: Console) -> None:
    style = NOTIFICATION_STYLES[notification.level]
    console.print(
        f"[{style}]{escape(notification.title)}[/{style}] {escape(notification.message)}"
    )
