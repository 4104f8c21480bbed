"""Include presets naming common clutter to hide."""

from __future__ import annotations

from typing import Final

PRESETS: Final[dict[str, list[str]]] = {
    "python": [
        "__pycache__",
        "*.egg-info",
        ".pytest_cache",
        ".mypy_cache",
        "*.pyc",
    ],
    "node": [
        "node_modules",
        ".next",
        "coverage",
    ],
    "build": [
        "build",
        "dist",
        "target",
        "out",
    ],
    "editor": [
        "*.swp",
        "*~",
        ".idea",
        ".vscode",
    ],
}


def get_preset_patterns(name: str) -> list[str]:
    """Return include glob patterns for a named preset.

    Args:
        name: Preset name.

    Returns:
        list[str]: Glob patterns, in preset order.

    Raises:
        ValueError: If ``name`` is not a known preset.
    """
    if name not in PRESETS:
        known = ", ".join(sorted(PRESETS))
        raise ValueError(f"Unknown preset '{name}'. Known presets: {known}")
    return list(PRESETS[name])
