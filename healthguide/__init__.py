"""
healthguide - Health information in Ugandan languages with voice narration.

Translates fixed English health texts with the Sunbird Translate API and
reads them aloud with ElevenLabs text-to-speech or the system voice.
"""

__version__ = "0.1.0"

from .config import Settings
from .orchestrator import GuideState, HealthGuide
from .cli import main

__all__ = ["Settings", "GuideState", "HealthGuide", "main"]
