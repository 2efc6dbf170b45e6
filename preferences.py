import json
import logging
import os
from typing import Optional

import config

logger = logging.getLogger(__name__)

DARK = "dark"
LIGHT = "light"
THEMES = (DARK, LIGHT)


class ThemeStore:
    """Keeps the dark/light theme choice in a small JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.THEME_FILE

    def load(self) -> Optional[str]:
        """Saved theme, or None when nothing valid has been saved."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning("Could not read theme preference", extra={"path": self.path, "error": str(e)})
            return None

        theme = data.get("theme") if isinstance(data, dict) else None
        return theme if theme in THEMES else None

    def save(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}', expected one of {', '.join(THEMES)}")
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as handle:
            json.dump({"theme": theme}, handle)
        logger.info("Saved theme preference", extra={"theme": theme})

    def resolve(self, prefers_dark: bool = False) -> str:
        """The saved theme, falling back to the system preference."""
        saved = self.load()
        if saved is not None:
            return saved
        return DARK if prefers_dark else LIGHT

    def toggle(self, current: str) -> str:
        """Switch to the other theme and remember it."""
        new_theme = LIGHT if current == DARK else DARK
        self.save(new_theme)
        return new_theme
