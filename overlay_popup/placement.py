"""Placement engine combining anchor, direction and measured overlay size (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from overlay_popup.anchor_resolver import resolve_attachment_point
from overlay_popup.geometry import ZERO_RECT, Point, Rect, Size
from overlay_popup.offset_resolver import resolve_direction_multiplier, resolve_fixed_offset
from overlay_popup.popup_config import PopupConfig


@dataclass(frozen=True)
class Placement:
    """Where the host should put the overlay.

    ``position`` is the overlay's centre before ``render_offset`` is applied;
    ``provisional`` marks results computed before the overlay was measured.
    """

    position: Point
    render_offset: Size
    provisional: bool = False

    @property
    def center(self) -> Point:
        return self.position + self.render_offset

    def top_left(self, overlay_size: Size) -> Point:
        return self.position - overlay_size / 2 + self.render_offset

    def frame(self, overlay_size: Size) -> Rect:
        return Rect(self.top_left(overlay_size), overlay_size)


@dataclass
class MeasuredGeometry:
    """Per-presentation cache of the latest host measurements."""

    anchor_value: Optional[Rect] = None
    content_frame: Rect = ZERO_RECT
    content_frame_measured: bool = False
    overlay_frame: Rect = ZERO_RECT
    overlay_measured: bool = False

    @property
    def content_size(self) -> Size:
        return self.content_frame.size

    @property
    def overlay_size(self) -> Size:
        return self.overlay_frame.size

    def invalidate_overlay(self) -> None:
        self.overlay_frame = ZERO_RECT
        self.overlay_measured = False

    def reset(self) -> None:
        self.anchor_value = None
        self.content_frame = ZERO_RECT
        self.content_frame_measured = False
        self.invalidate_overlay()


def compute_position(
    attachment_point: Point,
    overlay_size: Size,
    direction_multiplier: Size,
    fixed_offset: Size,
) -> Placement:
    """Centre the overlay on ``attachment_point`` and push it clear by half its size plus the gap."""

    render_offset = overlay_size / 2 * direction_multiplier + fixed_offset
    return Placement(position=attachment_point, render_offset=render_offset)


def compute_own_measured_position(
    overlay_own_origin: Point,
    parent_anchor_rect: Rect,
    direction_multiplier: Size,
) -> Point:
    """Offset the overlay's own measured origin by ``direction_multiplier * parent_anchor_rect.size``.

    Until the overlay has been measured its origin is zero, so the first frame
    is known to be wrong when the popup starts out visible.
    """

    return overlay_own_origin + direction_multiplier * parent_anchor_rect.size


def compute_placement(config: PopupConfig, geometry: MeasuredGeometry) -> Placement:
    edge = config.attachment_edge
    direction = resolve_direction_multiplier(config.alignment, edge)
    fixed_offset = resolve_fixed_offset(edge, config.edge_offset)
    overlay_size = geometry.overlay_size
    if config.uses_own_measured_anchor:
        anchor_rect = config.attachment_anchor.rect  # type: ignore[union-attr]
        attachment = compute_own_measured_position(
            geometry.overlay_frame.origin,
            anchor_rect,
            direction,
        )
    else:
        attachment = resolve_attachment_point(
            config.attachment_anchor,
            geometry.anchor_value,
            geometry.content_size,
            edge,
            measured_frame=geometry.content_frame if geometry.content_frame_measured else None,
        )
    placement = compute_position(attachment, overlay_size, direction, fixed_offset)
    if not geometry.overlay_measured:
        return Placement(placement.position, placement.render_offset, provisional=True)
    return placement
