"""
UI module for healthguide package.

Contains the Rich console rendering of the guide: header, selections,
previews, translated text, errors and the spinner shown while waiting.
"""

from contextlib import contextmanager
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from .catalog import HEALTH_TOPICS, LANGUAGES, get_language, get_topic, language_name, preview
from .orchestrator import HealthGuide

console = Console()


@contextmanager
def progress_context(description: str = "Processing...", out: Optional[Console] = None):
    """
    Spinner shown while an action is pending.

    Args:
        description: Task description

    Yields:
        The Progress instance with one indeterminate task running
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        TimeElapsedColumn(),
        transient=True,
        console=out or console,
    ) as progress:
        progress.add_task(description, total=None)
        yield progress


def render_header(out: Optional[Console] = None) -> None:
    out = out or console
    out.rule("[bold]Uganda Health Guide[/bold]")
    out.print(
        "Access important health information in your local language "
        "with high-quality voice narration",
        justify="center",
        style="dim",
    )


def languages_table() -> Table:
    table = Table(title="1. Select Your Language", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Code")
    table.add_column("Language", style="bold")
    table.add_column("Native name", style="dim")
    for i, lang in enumerate(LANGUAGES, 1):
        table.add_row(str(i), lang.code, lang.name, lang.native_name)
    return table


def topics_table() -> Table:
    table = Table(title="2. Choose Health Topic")
    table.add_column("#", justify="right")
    table.add_column("Key")
    table.add_column("Topic", style="bold")
    for i, topic in enumerate(HEALTH_TOPICS.values(), 1):
        table.add_row(str(i), topic.key, topic.title)
    return table


def render_selection(guide: HealthGuide, out: Optional[Console] = None) -> None:
    out = out or console
    state = guide.state
    if state.selected_language:
        lang = get_language(state.selected_language)
        lang_text = f"[bold]{lang.name}[/bold] [dim]({lang.native_name})[/dim]"
    else:
        lang_text = "[dim]Choose your preferred language[/dim]"
    if state.selected_topic:
        topic_text = f"[bold]{get_topic(state.selected_topic).title}[/bold]"
    else:
        topic_text = "[dim]Select a health topic[/dim]"
    out.print(f"Language: {lang_text}")
    out.print(f"Topic:    {topic_text}")


def render_preview(guide: HealthGuide, out: Optional[Console] = None) -> None:
    if not guide.state.selected_topic:
        return
    topic = get_topic(guide.state.selected_topic)
    (out or console).print(
        Panel(
            Group(Text(topic.title, style="bold blue"), Text(preview(topic))),
            title="English Content Preview",
            title_align="left",
        )
    )


def render_error(guide: HealthGuide, out: Optional[Console] = None) -> None:
    if not guide.state.error:
        return
    (out or console).print(
        Panel(Text(guide.state.error, style="red"), title="Error", subtitle=Text("[d] Dismiss"), border_style="red")
    )


def render_translation(guide: HealthGuide, out: Optional[Console] = None) -> None:
    out = out or console
    state = guide.state
    if not state.translated_text:
        return
    name = language_name(state.selected_language) or state.selected_language
    title = get_topic(state.selected_topic).title if state.selected_topic else ""
    out.print(
        Panel(
            Group(Text(title, style="bold blue"), Text(""), Text(state.translated_text)),
            title=f"Health Information in {name}:",
            title_align="left",
            border_style="blue",
        )
    )
    if state.is_generating_audio:
        out.print("[blue]Generating...[/blue]")
    elif state.is_playing:
        out.print("[blue]Playing audio...[/blue]")
    settings = guide.settings
    if not settings.translation_configured or not settings.speech_configured:
        out.print(
            Panel(
                "[bold]API Setup Required:[/bold] To enable real translation and "
                "text-to-speech, configure your Sunbird Translate API token and "
                "ElevenLabs API key in your environment variables.",
                border_style="cyan",
            )
        )


def render_footer(out: Optional[Console] = None) -> None:
    (out or console).print(
        "Powered by Sunbird Translate API & ElevenLabs Text-to-Speech\n"
        "[dim]Helping Ugandan communities access vital health information "
        "with natural voice narration[/dim]",
        justify="center",
    )


def render_actions(guide: HealthGuide, out: Optional[Console] = None) -> None:
    out = out or console
    actions = ["[l] language", "[t] topic"]
    if guide.can_translate:
        actions.append(f"[r] {guide.translate_label}")
    if guide.state.translated_text:
        actions.append(f"[a] {guide.audio_label}")
    if guide.state.error:
        actions.append("[d] dismiss")
    actions.append("[q] quit")
    out.print("  ".join(actions), style="bold", markup=False)


def render(guide: HealthGuide, out: Optional[Console] = None) -> None:
    """Draw the whole screen for the current state."""
    out = out or console
    render_header(out)
    render_selection(guide, out)
    render_preview(guide, out)
    render_error(guide, out)
    render_translation(guide, out)
    render_actions(guide, out)
