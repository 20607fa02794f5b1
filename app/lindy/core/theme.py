"""Theme management for the lindy CLI.

Theme preferences (light/dark mode and an accent color) are persisted in
~/.config/lindy/theme.toml. ThemeSettings owns them: it initializes from
storage once and writes every change straight back.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile

import tomli_w
from pydantic import BaseModel, ConfigDict, ValidationError
from rich.theme import Theme

from lindy.core.paths import get_theme_path

logger = logging.getLogger(__name__)


class ThemeMode(str, Enum):
    """Console color mode."""

    LIGHT = "light"
    DARK = "dark"


class Accent(str, Enum):
    """Accent colors, in cycling order."""

    GREEN = "green"
    TEAL = "teal"
    BLUE = "blue"
    PURPLE = "purple"
    ORANGE = "orange"
    RED = "red"
    PINK = "pink"
    INDIGO = "indigo"
    CYAN = "cyan"
    LIME = "lime"
    AMBER = "amber"
    DEEP_ORANGE = "deepOrange"


@dataclass(frozen=True, slots=True)
class AccentPalette:
    """Three shades of one accent color."""

    main: str
    light: str
    dark: str


ACCENT_PALETTES: dict[Accent, AccentPalette] = {
    Accent.GREEN: AccentPalette("#00c853", "#5efc82", "#009624"),
    Accent.TEAL: AccentPalette("#009688", "#52c7b8", "#00675b"),
    Accent.BLUE: AccentPalette("#2962ff", "#768fff", "#0039cb"),
    Accent.PURPLE: AccentPalette("#7e57c2", "#b085f5", "#4d2c91"),
    Accent.ORANGE: AccentPalette("#fb8c00", "#ffbd45", "#c25e00"),
    Accent.RED: AccentPalette("#d32f2f", "#ff6659", "#9a0007"),
    Accent.PINK: AccentPalette("#e91e63", "#ff6090", "#b0003a"),
    Accent.INDIGO: AccentPalette("#3f51b5", "#757de8", "#002984"),
    Accent.CYAN: AccentPalette("#00bcd4", "#62efff", "#008ba3"),
    Accent.LIME: AccentPalette("#cddc39", "#ffff72", "#99aa00"),
    Accent.AMBER: AccentPalette("#ffc107", "#fff350", "#c79100"),
    Accent.DEEP_ORANGE: AccentPalette("#ff5722", "#ff8a50", "#c41c00"),
}


class ThemePreferences(BaseModel):
    """Persisted theme preferences."""

    model_config = ConfigDict(extra="forbid")

    mode: ThemeMode = ThemeMode.DARK
    accent: Accent = Accent.GREEN


def load_preferences(path: Path) -> ThemePreferences:
    """Load theme preferences, falling back to defaults on any problem.

    Args:
        path: Path to the theme TOML file.

    Returns:
        Stored preferences, or defaults if missing or invalid.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return ThemePreferences()
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", path, e)
        return ThemePreferences()
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return ThemePreferences()

    try:
        return ThemePreferences.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid theme preferences in %s, using defaults: %s", path, e)
        return ThemePreferences()


def save_preferences(preferences: ThemePreferences, path: Path) -> None:
    """Write theme preferences atomically.

    Args:
        preferences: Preferences to persist.
        path: Destination TOML file.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(mode="wb", dir=path.parent, delete=False, suffix=".tmp") as f:
            tmp_path = Path(f.name)
            tomli_w.dump(preferences.model_dump(mode="json"), f)
        os.replace(str(tmp_path), str(path))
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


class ThemeSettings:
    """Theme preference store with write-through persistence.

    Example:
        >>> settings = ThemeSettings()
        >>> settings.cycle_accent()
        <Accent.TEAL: 'teal'>
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path is not None else get_theme_path()
        self._preferences = load_preferences(self._path)

    @property
    def mode(self) -> ThemeMode:
        return self._preferences.mode

    @property
    def accent(self) -> Accent:
        return self._preferences.accent

    @property
    def palette(self) -> AccentPalette:
        return ACCENT_PALETTES[self._preferences.accent]

    def toggle_mode(self) -> ThemeMode:
        """Switch between light and dark mode and persist the change."""
        new_mode = ThemeMode.LIGHT if self.mode == ThemeMode.DARK else ThemeMode.DARK
        self._update(mode=new_mode)
        return new_mode

    def set_mode(self, mode: ThemeMode) -> None:
        self._update(mode=mode)

    def set_accent(self, accent: Accent) -> None:
        self._update(accent=accent)

    def cycle_accent(self) -> Accent:
        """Advance to the next accent color and persist the change."""
        order = list(Accent)
        next_accent = order[(order.index(self.accent) + 1) % len(order)]
        self._update(accent=next_accent)
        return next_accent

    def _update(self, **changes: object) -> None:
        self._preferences = self._preferences.model_copy(update=changes)
        try:
            save_preferences(self._preferences, self._path)
        except OSError as e:
            # The in-memory preference still applies for this run
            logger.warning("Failed to persist theme preferences to %s: %s", self._path, e)


def get_rich_theme(mode: ThemeMode = ThemeMode.DARK, accent: Accent = Accent.GREEN) -> Theme:
    """Build the Rich theme for a mode/accent combination.

    Args:
        mode: Light or dark console mode.
        accent: Accent color used for headers and highlights.

    Returns:
        Rich Theme instance configured with the color scheme.
    """
    palette = ACCENT_PALETTES[accent]
    dark = mode == ThemeMode.DARK
    accent_shade = palette.light if dark else palette.dark

    styles: dict[str, str] = {
        "text": "#ffffff" if dark else "#141922",
        "muted": "#b2bec3" if dark else "#5f6b73",
        "header": palette.main,
        "bold_header": f"bold {palette.main}",
        "border": palette.dark if dark else palette.light,
        "accent": accent_shade,
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "dim": "#b2bec3" if dark else "#5f6b73",
        "block.managed": f"bold {accent_shade}",
        "block.foreign": "#f5b332",
        "block.line": "#b2bec3" if dark else "#5f6b73",
    }
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme for the stored preferences, loading it once."""
    global _cached_theme
    if _cached_theme is None:
        preferences = load_preferences(get_theme_path())
        _cached_theme = get_rich_theme(preferences.mode, preferences.accent)
    return _cached_theme
