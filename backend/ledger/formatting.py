"""Display helpers for game titles."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import tzinfo

    from shared.dal.models import Game

DEFAULT_GAME_NAME = "Tarok"

# Stored names often carry the creation stamp ("Tarok 12. 3. 2025 ob 19:30"),
# which the title re-renders from created_at.
_NAME_NOISE = (
    re.compile(r"\d{1,2}\.\s\d{1,2}\.\s\d{4}"),
    re.compile(r"\d{1,2}\.\s\d{1,2}\."),
    re.compile(r"\d{1,2}:\d{2}"),
    re.compile(r"\bob\b", re.IGNORECASE),
)
_TRAILING_PUNCTUATION = re.compile(r"[,.-]+$")


def clean_game_name(name: str, default: str = DEFAULT_GAME_NAME) -> str:
    for pattern in _NAME_NOISE:
        name = pattern.sub("", name)
    name = _TRAILING_PUNCTUATION.sub("", name.strip()).strip()
    return name or default


def format_game_title(game: Game, *, default: str = DEFAULT_GAME_NAME, tz: tzinfo | None = None) -> str:
    """Render "<name>, DD. MM. YYYY (HH:MM)" from the game's name and creation time."""
    created = game.created_at.astimezone(tz) if tz is not None else game.created_at
    return f"{clean_game_name(game.name, default)}, {created:%d. %m. %Y} ({created:%H:%M})"
