class AudioError(Exception):
    """Raised when a cue tone cannot be synthesized or played."""
