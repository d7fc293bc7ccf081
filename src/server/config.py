"""Settings for the routine page server: bind address and page location."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
ROOT_PATH = "/"
INDEX_PATH = "/index.html"
HEALTHZ_PATH = "/healthz"

# Shipped as package data next to this module.
BUNDLED_UI_DIR = Path(__file__).resolve().parent / "web_ui"
DEFAULT_INDEX_FILE = BUNDLED_UI_DIR / "index.html"


def _check_page(index_file: str) -> None:
    if not index_file:
        raise ServerConfigurationError("ui_server.index_file cannot be empty")
    page = Path(index_file)
    if not page.is_file():
        reason = "is not a file" if page.exists() else "not found"
        raise ServerConfigurationError(f"UI index file {reason}: {page}")


@dataclass(frozen=True)
class UIServerConfig:
    """Where the routine page is served from and which page it is.

    The directory holding `index_file` doubles as the root for any other
    static asset the page references.
    """
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = str(DEFAULT_INDEX_FILE)

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        # A disabled server never reads the page.
        if self.enabled:
            _check_page(self.index_file)

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def ui_root(self) -> Path:
        return Path(self.index_file).parent

    @property
    def uses_bundled_page(self) -> bool:
        return Path(self.index_file).resolve() == DEFAULT_INDEX_FILE

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        configured = (settings.index_file or "").strip()
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            index_file=configured or str(DEFAULT_INDEX_FILE),
        )
