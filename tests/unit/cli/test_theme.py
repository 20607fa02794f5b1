"""Unit tests for the theme commands."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from lindy.cli.main import app
from lindy.core.theme import Accent, ThemeMode, load_preferences
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def theme_path(tmp_path: Path):
    """Redirect the theme file into a temporary config home."""
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
        yield tmp_path / "lindy" / "theme.toml"


class TestThemeCommands:
    """Tests for lindy theme."""

    def test_show(self, theme_path: Path) -> None:
        """show lists mode and accents."""
        result = runner.invoke(app, ["theme", "show"])

        assert result.exit_code == 0
        assert "Mode:" in result.stdout
        assert "deepOrange" in result.stdout

    def test_mode_light(self, theme_path: Path) -> None:
        """mode light is saved."""
        result = runner.invoke(app, ["theme", "mode", "light"])

        assert result.exit_code == 0
        assert "Mode set to light" in result.stdout
        assert load_preferences(theme_path).mode == ThemeMode.LIGHT

    def test_mode_toggle(self, theme_path: Path) -> None:
        """mode without argument toggles."""
        runner.invoke(app, ["theme", "mode"])

        assert load_preferences(theme_path).mode == ThemeMode.LIGHT

    def test_accent(self, theme_path: Path) -> None:
        """accent NAME is saved."""
        result = runner.invoke(app, ["theme", "accent", "pink"])

        assert result.exit_code == 0
        assert load_preferences(theme_path).accent == Accent.PINK

    def test_unknown_accent(self, theme_path: Path) -> None:
        """Unknown accents are rejected."""
        result = runner.invoke(app, ["theme", "accent", "chartreuse"])

        assert result.exit_code == 1
        assert "Unknown accent" in result.output
        assert not theme_path.exists()
