"""
CLI module for healthguide package.

Contains argument parsing, logging setup and the interactive session loop.
"""

import argparse
import asyncio
import logging
import sys
import threading
from typing import Awaitable, Callable, List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt

from .catalog import HEALTH_TOPICS, LANGUAGES
from .config import SPEECH_MODES, Settings
from .errors import ConfigError
from .orchestrator import HealthGuide
from .ui import console, languages_table, progress_context, render, render_footer, topics_table

logger = logging.getLogger(__name__)

Ask = Callable[[str, List[str]], Awaitable[str]]

ACTIONS = ["l", "t", "r", "a", "d", "q"]


# ----------------------------
# CLI setup
# ----------------------------
def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="healthguide",
        description="Read and listen to health information in Ugandan languages.",
    )
    parser.add_argument("--speech", choices=SPEECH_MODES,
                        help="Speech backend: ElevenLabs audio (remote) or the system voice (local).")
    parser.add_argument("--demo-delay", type=float,
                        help="Seconds to wait when showing a demo translation.")
    parser.add_argument("--list-languages", action="store_true",
                        help="Print the supported languages and exit.")
    parser.add_argument("--list-topics", action="store_true",
                        help="Print the available health topics and exit.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging.")
    return parser


def validate_args(args) -> None:
    """Validate command-line arguments."""
    if args.demo_delay is not None and args.demo_delay < 0:
        raise ValueError(f"--demo-delay must not be negative, got {args.demo_delay}")


def setup_logging(level: str, out: Optional[Console] = None) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=out or console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # request lines from httpx are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ----------------------------
# Interactive session
# ----------------------------
def _settle(future: "asyncio.Future[str]", answer: Optional[str], exc: Optional[BaseException]) -> None:
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(answer)


async def prompt_choice(question: str, choices: List[str]) -> str:
    """
    Ask on a daemon thread so playback callbacks keep running.

    The thread is not part of the loop's default executor, so an interrupt
    can end the program while input() is still blocked.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def ask() -> None:
        answer, error = None, None
        try:
            answer = Prompt.ask(question, choices=choices, console=console)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_settle, future, answer, error)
        except RuntimeError:
            # loop already closed; nobody is waiting for the answer
            pass

    threading.Thread(target=ask, name="healthguide-prompt", daemon=True).start()
    return await future


async def run_session(guide: HealthGuide, ask: Ask = prompt_choice, out: Optional[Console] = None) -> None:
    """Drive the guide from user choices until the user quits."""
    out = out or console
    while True:
        render(guide, out)
        action = (await ask("Action", ACTIONS)).strip().lower()

        if action == "q":
            guide.stop()
            break
        if action == "l":
            out.print(languages_table())
            guide.select_language(await ask("Language", [lang.code for lang in LANGUAGES]))
        elif action == "t":
            out.print(topics_table())
            guide.select_topic(await ask("Topic", list(HEALTH_TOPICS)))
        elif action == "r":
            with progress_context("Translating...", out):
                await guide.translate()
        elif action == "a":
            if guide.state.is_playing:
                guide.stop()
            else:
                with progress_context("Generating Audio...", out):
                    await guide.speak()
        elif action == "d":
            guide.dismiss_error()

    render_footer(out)


async def _run(settings: Settings) -> None:
    async with HealthGuide(settings) as guide:
        await run_session(guide)


# ----------------------------
# Main application logic
# ----------------------------
def main(argv: Optional[List[str]] = None):
    """Main entry point for the healthguide CLI application."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        validate_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        settings = Settings.from_env().with_overrides(
            speech_mode=args.speech,
            demo_delay=args.demo_delay,
            log_level="DEBUG" if args.verbose else None,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(settings.log_level)

    if args.list_languages:
        console.print(languages_table())
        sys.exit(0)
    if args.list_topics:
        console.print(topics_table())
        sys.exit(0)

    if not settings.translation_configured:
        logger.warning("SUNBIRD_AUTH_TOKEN not set; translations will be demonstrations")
    if settings.speech_mode == "remote" and not settings.speech_configured:
        logger.warning("ELEVENLABS_API_KEY not set; text-to-speech is disabled")

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        console.print("Goodbye.")
