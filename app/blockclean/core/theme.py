"""Console colour theme for blockclean output.

Defaults live on :class:`ThemeColors`; any subset can be overridden in
``~/.config/blockclean/theme.toml`` under a ``[colors]`` table.
"""

import logging
import re
import tomllib
from functools import cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


class ThemeColors(BaseModel):
    """Hex colours (#RGB or #RRGGBB) for each style the CLI prints with."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Disk usage status column
    usage_ok: str = "#03b971"
    usage_over: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def _check_hex(cls, value: object) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            raise ValueError(f"expected a #RGB or #RRGGBB colour, got {value!r}")
        return value.strip()


def get_user_theme_path() -> Path:
    """Location of the per-user colour overrides."""
    return Path.home() / ".config" / "blockclean" / "theme.toml"


def load_theme(path: Path | None = None) -> ThemeColors:
    """Load theme colours, applying overrides from ``path`` when present.

    An unreadable or invalid override file is logged and ignored.

    Args:
        path: Override file to read. Defaults to the user theme path.
    """
    path = path or get_user_theme_path()
    try:
        with open(path, "rb") as f:
            overrides = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return ThemeColors()
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return ThemeColors()

    if not isinstance(overrides, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return ThemeColors()

    try:
        return ThemeColors(**overrides)
    except ValidationError as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Map theme colours to the Rich style names used in markup."""
    colors = colors or load_theme()
    return Theme(
        {
            "muted": colors.muted,
            "bold_header": f"bold {colors.header}",
            "border": colors.border,
            "success": colors.success,
            "warning": colors.warning,
            "error": f"bold {colors.error}",
            "info": colors.info,
            "usage_ok": colors.usage_ok,
            "usage_over": f"bold {colors.usage_over}",
        }
    )


@cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return get_rich_theme()
