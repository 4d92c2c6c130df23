"""
Playback module for healthguide package.

Defines the speech backend interface used by the orchestrators and the two
platform adapters: an external audio player process for synthesized audio,
and pyttsx3 for local speech synthesis.
"""

import asyncio
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

import pyttsx3

from .errors import PlaybackError, PlaybackUnavailableError, SpeechUnavailableError

logger = logging.getLogger(__name__)


class SpeechBackend(ABC):
    """
    A single playback session at a time.

    start() replaces whatever is playing; stop() is idempotent. Completion is
    reported through on_end / on_error, always on the event loop thread.
    """

    def __init__(self) -> None:
        self.on_end: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[BaseException], None]] = None

    @abstractmethod
    async def start(self, payload: Any) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @property
    @abstractmethod
    def is_active(self) -> bool:
        ...

    def ensure_available(self) -> Any:
        """Raise if the platform cannot provide this capability."""
        return None

    def close(self) -> None:
        self.stop()

    def _emit_end(self) -> None:
        if self.on_end:
            self.on_end()

    def _emit_error(self, exc: BaseException) -> None:
        if self.on_error:
            self.on_error(exc)


# ----------------------------
# External player (synthesized audio)
# ----------------------------
def select_player_cmd(audio_path: Path) -> Optional[List[str]]:
    """Return a command that plays audio on macOS/Linux, or None if no player is found."""
    ext = audio_path.suffix.lower().lstrip(".")
    platform = sys.platform

    if platform == "darwin":
        if shutil.which("afplay"):
            return ["afplay", str(audio_path)]
        if shutil.which("ffplay"):
            return ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", str(audio_path)]
        if shutil.which("mpv"):
            return ["mpv", "--no-video", "--really-quiet", str(audio_path)]
        if shutil.which("vlc"):
            return ["vlc", "--intf", "dummy", "--play-and-exit", "--quiet", str(audio_path)]
        return None

    if platform.startswith("linux"):
        if shutil.which("ffplay"):
            return ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", str(audio_path)]
        if shutil.which("mpv"):
            return ["mpv", "--no-video", "--really-quiet", str(audio_path)]
        if shutil.which("vlc"):
            return ["vlc", "--intf", "dummy", "--play-and-exit", "--quiet", str(audio_path)]
        if shutil.which("mplayer"):
            return ["mplayer", "-really-quiet", str(audio_path)]
        if ext == "mp3" and shutil.which("mpg123"):
            return ["mpg123", "-q", str(audio_path)]
        if shutil.which("paplay"):
            return ["paplay", str(audio_path)]
        if shutil.which("play"):
            return ["play", "-q", str(audio_path)]
        return None

    return None


class PlayerProcessBackend(SpeechBackend):
    """Plays audio bytes by handing a temporary file to a system player."""

    def __init__(
        self,
        suffix: str = ".mp3",
        command_for: Callable[[Path], Optional[List[str]]] = select_player_cmd,
    ) -> None:
        super().__init__()
        self._suffix = suffix
        self._command_for = command_for
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._path: Optional[Path] = None
        self._watcher: Optional[asyncio.Future] = None

    @property
    def is_active(self) -> bool:
        return self._proc is not None

    async def start(self, audio: bytes) -> None:
        self.stop()

        fd, name = tempfile.mkstemp(prefix="healthguide_", suffix=self._suffix)
        with os.fdopen(fd, "wb") as fh:
            fh.write(audio)
        path = Path(name)

        cmd = self._command_for(path)
        if not cmd:
            self._release(path)
            raise PlaybackUnavailableError("No suitable audio player found for this system")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
            )
        except OSError as exc:
            self._release(path)
            raise PlaybackError(f"Could not start {cmd[0]}: {exc}") from exc

        logger.debug("Playing %s with %s (pid %s)", path, cmd[0], proc.pid)
        self._proc = proc
        self._path = path
        self._watcher = asyncio.ensure_future(self._watch(proc, path))

    async def _watch(self, proc: asyncio.subprocess.Process, path: Path) -> None:
        returncode = await proc.wait()
        if proc is not self._proc:
            # stopped or replaced; stop() already released the file
            return
        self._proc = None
        self._path = None
        self._release(path)
        if returncode == 0:
            self._emit_end()
        else:
            self._emit_error(PlaybackError(f"Player exited with status {returncode}"))

    def stop(self) -> None:
        proc, path = self._proc, self._path
        self._proc = None
        self._path = None
        if proc is not None and proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass
        if path is not None:
            self._release(path)

    @staticmethod
    def _release(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass


# ----------------------------
# Local speech synthesis
# ----------------------------
@dataclass(frozen=True)
class Utterance:
    text: str
    locale: str
    rate: float = 1.0
    pitch: Optional[float] = None
    volume: Optional[float] = None


def _normalize_locale(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", "ignore")
    return str(value).strip("\x05").lower().replace("_", "-")


def find_voice(voices: List[Any], locale: str) -> Optional[Any]:
    """Pick the first installed voice whose languages or id mention the locale."""
    wanted = _normalize_locale(locale)
    base = wanted.split("-")[0]
    for voice in voices:
        langs = [_normalize_locale(lang) for lang in (getattr(voice, "languages", None) or [])]
        if wanted in langs:
            return voice
    for voice in voices:
        langs = [_normalize_locale(lang) for lang in (getattr(voice, "languages", None) or [])]
        voice_id = _normalize_locale(getattr(voice, "id", ""))
        if any(lang.split("-")[0] == base for lang in langs) or wanted in voice_id:
            return voice
    return None


class Pyttsx3Backend(SpeechBackend):
    """Speaks utterances with the platform speech engine through pyttsx3."""

    def __init__(self, engine_factory: Callable[[], Any] = pyttsx3.init) -> None:
        super().__init__()
        self._engine_factory = engine_factory
        self._engine: Any = None
        self._default_rate: Optional[float] = None
        # one worker: a new utterance waits until the stopped one has unwound
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pyttsx3")
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._active = False
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self._active

    def ensure_available(self) -> Any:
        """Initialise the engine, raising SpeechUnavailableError if the platform has none."""
        if self._engine is None:
            try:
                self._engine = self._engine_factory()
            except Exception as exc:
                raise SpeechUnavailableError(f"Speech engine unavailable: {exc}") from exc
            self._default_rate = self._engine.getProperty("rate")
        return self._engine

    async def start(self, utterance: Utterance) -> None:
        engine = self.ensure_available()
        self.stop()
        self._loop = asyncio.get_running_loop()
        self._generation += 1
        self._active = True
        self._loop.run_in_executor(
            self._executor, self._speak, engine, utterance, self._generation
        )

    def _speak(self, engine: Any, utterance: Utterance, generation: int) -> None:
        try:
            voice = find_voice(engine.getProperty("voices") or [], utterance.locale)
            if voice is not None:
                engine.setProperty("voice", voice.id)
            else:
                logger.debug("No installed voice for %s; using engine default", utterance.locale)
            if self._default_rate:
                engine.setProperty("rate", int(self._default_rate * utterance.rate))
            if utterance.volume is not None:
                engine.setProperty("volume", utterance.volume)
            if generation != self._generation:
                logger.debug("Utterance cancelled before it was queued")
                return
            engine.say(utterance.text)
            engine.runAndWait()
        except Exception as exc:
            self._loop.call_soon_threadsafe(self._finish, generation, exc)
        else:
            self._loop.call_soon_threadsafe(self._finish, generation, None)

    def _finish(self, generation: int, exc: Optional[BaseException]) -> None:
        if generation != self._generation or not self._active:
            return
        self._active = False
        if exc is not None:
            self._emit_error(exc)
        else:
            self._emit_end()

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._generation += 1
        self._engine.stop()

    def close(self) -> None:
        self.stop()
        self._executor.shutdown(wait=False)
