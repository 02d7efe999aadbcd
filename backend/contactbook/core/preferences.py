"""
Process-wide preference store. Holds the theme; read once at startup via load().
"""

import json
import logging
from pathlib import Path
from typing import Literal, Optional, get_args

logger = logging.getLogger(__name__)

Theme = Literal["dark", "light"]
DEFAULT_THEME: Theme = "light"


class PreferenceStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._theme: Optional[Theme] = None

    @property
    def loaded(self) -> bool:
        return self._theme is not None

    def load(self) -> Theme:
        """Read the persisted theme. Missing or unreadable files fall back to the default."""
        theme: Theme = DEFAULT_THEME
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read preferences from %s: %s", self.path, e)
            raw = {}
        value = raw.get("theme") if isinstance(raw, dict) else None
        if value in get_args(Theme):
            theme = value
        self._theme = theme
        return theme

    @property
    def theme(self) -> Theme:
        if self._theme is None:
            raise RuntimeError("PreferenceStore.load() must be called before reading preferences")
        return self._theme

    def set_theme(self, theme: Theme) -> Theme:
        if theme not in get_args(Theme):
            raise ValueError(f"Unknown theme: {theme!r}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"theme": theme}), encoding="utf-8")
        self._theme = theme
        logger.info("Theme set to %s", theme)
        return theme


_store: Optional[PreferenceStore] = None


def init_preferences(path: Path) -> PreferenceStore:
    global _store
    _store = PreferenceStore(path)
    _store.load()
    return _store


def get_preferences() -> PreferenceStore:
    """Dependency for FastAPI. The store is created by the app lifespan."""
    if _store is None:
        raise RuntimeError("Preferences are not initialised; call init_preferences() at startup")
    return _store
