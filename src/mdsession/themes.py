"""Preview themes known to the editor."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    description: str
    category: str  # light or dark


THEMES = (
    Theme("github", "GitHub", "Classic GitHub style", "light"),
    Theme("material", "Material", "Material Design style", "light"),
    Theme("dracula", "Dracula", "Dark theme", "dark"),
    Theme("solarized", "Solarized", "Solarized palette", "light"),
    Theme("nord", "Nord", "Arctic Nord palette", "dark"),
    Theme("monokai", "Monokai", "Classic Monokai palette", "dark"),
    Theme("minimal", "Minimal", "Minimal style", "light"),
    Theme("academic", "Academic", "Academic paper style", "light"),
)

DEFAULT_THEME = "github"


def get_theme(theme_id: str) -> Theme:
    """Look up a theme, falling back to the default for unknown ids."""
    for theme in THEMES:
        if theme.id == theme_id:
            return theme
    return THEMES[0]


def is_known_theme(theme_id: str) -> bool:
    return any(theme.id == theme_id for theme in THEMES)
