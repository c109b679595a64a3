"""Attachment-point resolution for popup anchors (pure, no Qt)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from overlay_popup.geometry import ZERO_POINT, ZERO_SIZE, Point, Rect, Size, UnitPoint

_LOGGER = logging.getLogger("OverlayPopup.Placement")


class AttachmentEdge(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEADING = "leading"
    TRAILING = "trailing"


_EDGE_TOKENS: Mapping[str, AttachmentEdge] = {
    "top": AttachmentEdge.TOP,
    "n": AttachmentEdge.TOP,
    "bottom": AttachmentEdge.BOTTOM,
    "s": AttachmentEdge.BOTTOM,
    "leading": AttachmentEdge.LEADING,
    "left": AttachmentEdge.LEADING,
    "w": AttachmentEdge.LEADING,
    "trailing": AttachmentEdge.TRAILING,
    "right": AttachmentEdge.TRAILING,
    "e": AttachmentEdge.TRAILING,
}

# Where on the anchor rectangle each edge attaches, as a fraction of its size.
_EDGE_MULTIPLIERS: Mapping[AttachmentEdge, Size] = {
    AttachmentEdge.TOP: Size(0.5, 0.0),
    AttachmentEdge.BOTTOM: Size(0.5, 1.0),
    AttachmentEdge.LEADING: Size(0.0, 0.5),
    AttachmentEdge.TRAILING: Size(1.0, 0.5),
}


@dataclass(frozen=True)
class RectAnchor:
    """Attach to an explicit rectangle."""

    rect: Rect


@dataclass(frozen=True)
class BoundsAnchor:
    """Attach to the full measured bounds of the anchor element."""


@dataclass(frozen=True)
class UnitPointAnchor:
    """Attach to a proportional point inside the anchor element's bounds."""

    unit_point: UnitPoint


AttachmentAnchor = Union[RectAnchor, BoundsAnchor, UnitPointAnchor]


def coerce_edge(value: object) -> Optional[AttachmentEdge]:
    """Map an edge member or token to an ``AttachmentEdge``; unknown values give None."""

    if isinstance(value, AttachmentEdge):
        return value
    if not isinstance(value, str):
        return None
    return _EDGE_TOKENS.get(value.strip().lower())


def edge_multiplier(edge: object) -> Size:
    resolved = coerce_edge(edge)
    if resolved is None:
        _LOGGER.debug("Unknown attachment edge %r; using neutral multiplier", edge)
        return ZERO_SIZE
    return _EDGE_MULTIPLIERS[resolved]


def _point_on_rect(rect: Rect, edge: object) -> Point:
    return rect.origin + edge_multiplier(edge) * rect.size


def resolve_attachment_point(
    anchor: AttachmentAnchor,
    anchor_rect: Optional[Rect],
    container_size: Size,
    edge: object,
    *,
    measured_frame: Optional[Rect] = None,
) -> Point:
    """Return the point on the anchor where the popup attaches.

    ``anchor_rect`` is the abstract anchor value reported by the host (None
    until the first layout pass). ``measured_frame`` is the anchor element's
    measured absolute frame; when present its origin wins over the abstract
    value, since the two coordinate spaces can disagree after padding or
    transforms. Unit points land inside the anchor element, so they are
    offset by the measured origin too. Missing geometry resolves to the origin.
    """

    origin = measured_frame.origin if measured_frame is not None else ZERO_POINT
    if isinstance(anchor, RectAnchor):
        return _point_on_rect(anchor.rect, edge)
    if isinstance(anchor, UnitPointAnchor):
        return origin + anchor.unit_point.scale(container_size)
    if isinstance(anchor, BoundsAnchor):
        if anchor_rect is not None:
            size = anchor_rect.size
        elif measured_frame is not None:
            size = measured_frame.size
        elif container_size != ZERO_SIZE:
            size = container_size
        else:
            return ZERO_POINT
        return _point_on_rect(Rect(origin, size), edge)
    _LOGGER.debug("Unknown attachment anchor %r; attaching at origin", anchor)
    return ZERO_POINT
