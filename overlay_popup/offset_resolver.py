"""Direction multipliers and edge offsets for popup placement (pure, no Qt)."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping, Optional

from overlay_popup.anchor_resolver import AttachmentEdge, coerce_edge
from overlay_popup.geometry import ZERO_SIZE, Size

_LOGGER = logging.getLogger("OverlayPopup.Placement")


class Alignment(str, Enum):
    TOP_LEADING = "top_leading"
    TOP = "top"
    TOP_TRAILING = "top_trailing"
    LEADING = "leading"
    CENTER = "center"
    TRAILING = "trailing"
    BOTTOM_LEADING = "bottom_leading"
    BOTTOM = "bottom"
    BOTTOM_TRAILING = "bottom_trailing"


_ALIGNMENT_TOKENS: Mapping[str, Alignment] = {
    "nw": Alignment.TOP_LEADING,
    "top_leading": Alignment.TOP_LEADING,
    "top_left": Alignment.TOP_LEADING,
    "n": Alignment.TOP,
    "top": Alignment.TOP,
    "ne": Alignment.TOP_TRAILING,
    "top_trailing": Alignment.TOP_TRAILING,
    "top_right": Alignment.TOP_TRAILING,
    "w": Alignment.LEADING,
    "left": Alignment.LEADING,
    "leading": Alignment.LEADING,
    "c": Alignment.CENTER,
    "center": Alignment.CENTER,
    "e": Alignment.TRAILING,
    "right": Alignment.TRAILING,
    "trailing": Alignment.TRAILING,
    "sw": Alignment.BOTTOM_LEADING,
    "bottom_leading": Alignment.BOTTOM_LEADING,
    "bottom_left": Alignment.BOTTOM_LEADING,
    "s": Alignment.BOTTOM,
    "bottom": Alignment.BOTTOM,
    "se": Alignment.BOTTOM_TRAILING,
    "bottom_trailing": Alignment.BOTTOM_TRAILING,
    "bottom_right": Alignment.BOTTOM_TRAILING,
}

_ALIGNMENT_MULTIPLIERS: Mapping[Alignment, Size] = {
    Alignment.TOP_LEADING: Size(-1.0, -1.0),
    Alignment.TOP: Size(0.0, -1.0),
    Alignment.TOP_TRAILING: Size(1.0, -1.0),
    Alignment.LEADING: Size(-1.0, 0.0),
    Alignment.CENTER: Size(0.0, 0.0),
    Alignment.TRAILING: Size(1.0, 0.0),
    Alignment.BOTTOM_LEADING: Size(-1.0, 1.0),
    Alignment.BOTTOM: Size(0.0, 1.0),
    Alignment.BOTTOM_TRAILING: Size(1.0, 1.0),
}

# Push-out direction away from the anchor when no alignment is given.
_EDGE_DIRECTIONS: Mapping[AttachmentEdge, Size] = {
    AttachmentEdge.TOP: Size(0.0, -1.0),
    AttachmentEdge.BOTTOM: Size(0.0, 1.0),
    AttachmentEdge.LEADING: Size(-1.0, 0.0),
    AttachmentEdge.TRAILING: Size(1.0, 0.0),
}


def coerce_alignment(value: object) -> Optional[Alignment]:
    if isinstance(value, Alignment):
        return value
    if not isinstance(value, str):
        return None
    token = value.strip().lower().replace("-", "_").replace(" ", "_")
    return _ALIGNMENT_TOKENS.get(token)


def resolve_direction_multiplier(alignment: object, edge: object) -> Size:
    """Return the signed per-axis multiplier applied to half the overlay size."""

    if alignment is not None:
        resolved = coerce_alignment(alignment)
        if resolved is None:
            _LOGGER.debug("Unknown alignment %r; using neutral multiplier", alignment)
            return ZERO_SIZE
        return _ALIGNMENT_MULTIPLIERS[resolved]
    resolved_edge = coerce_edge(edge)
    if resolved_edge is None:
        _LOGGER.debug("Unknown attachment edge %r; using neutral direction", edge)
        return ZERO_SIZE
    return _EDGE_DIRECTIONS[resolved_edge]


def resolve_fixed_offset(edge: object, magnitude: float) -> Size:
    """Return the constant gap vector along the axis implied by ``edge``."""

    resolved = coerce_edge(edge)
    if resolved is None:
        return ZERO_SIZE
    try:
        amount = float(magnitude)
    except (TypeError, ValueError):
        return ZERO_SIZE
    if amount != amount:
        return ZERO_SIZE
    return _EDGE_DIRECTIONS[resolved] * amount
