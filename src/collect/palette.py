"""Named color palettes shared by the metadata store and the library index."""

from __future__ import annotations

import hashlib
from typing import Mapping, Sequence

# Background colors for document cards; a new record picks one by hashing its id.
CARD_PALETTE: tuple[str, ...] = (
    "cardPeach",
    "cardDarkRed",
    "cardPink",
    "cardPurple",
    "cardRed",
    "cardSalmon",
    "cardYellow",
    "cardOrange",
    "cardDarkGreen",
    "cardGreen",
    "cardTeal",
    "cardBlue",
    "cardCyan",
    "cardNavy",
)

# Category dot colors, handed out round-robin to tags without an assignment.
CATEGORY_PALETTE: tuple[str, ...] = (
    "blue",
    "green",
    "orange",
    "pink",
    "purple",
    "yellow",
    "gray",
    "tan",
)

UNCATEGORIZED = "Uncategorized"
UNCATEGORIZED_COLOR = "gray"


def stable_choice(key: str, palette: Sequence[str]) -> str:
    """Pick an entry of ``palette`` from a digest of ``key``.

    The digest is process-independent, unlike ``hash()``, so the same key maps
    to the same entry across runs.
    """
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return palette[int.from_bytes(digest[:8], "big") % len(palette)]


def next_category_color(
    assigned: Mapping[str, str],
    palette: Sequence[str] = CATEGORY_PALETTE,
) -> str:
    """Return the first palette color not yet assigned to any tag.

    Once every color is in use the palette is reused round-robin, keyed on the
    number of existing assignments.
    """
    used = set(assigned.values())
    for color in palette:
        if color not in used:
            return color
    return palette[len(assigned) % len(palette)]


__all__ = [
    "CARD_PALETTE",
    "CATEGORY_PALETTE",
    "UNCATEGORIZED",
    "UNCATEGORIZED_COLOR",
    "next_category_color",
    "stable_choice",
]
