"""Public exports for cue tone synthesis.

`audio.output` is imported explicitly by callers that play sound, since
importing sounddevice requires a PortAudio installation.
"""

from .config import AudioConfig, AudioConfigurationError, CueTone
from .errors import AudioError
from .tones import synthesize_tone

__all__ = [
    "AudioConfig",
    "AudioConfigurationError",
    "AudioError",
    "CueTone",
    "synthesize_tone",
]
