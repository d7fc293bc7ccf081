"""Runtime engine exports."""

from .loop import EngineOptions, RuntimeEngine

__all__ = ["EngineOptions", "RuntimeEngine"]
