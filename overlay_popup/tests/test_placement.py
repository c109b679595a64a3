from __future__ import annotations

import pytest

from overlay_popup.anchor_resolver import AttachmentEdge, BoundsAnchor, RectAnchor, UnitPointAnchor
from overlay_popup.geometry import Point, Rect, Size, UnitPoint
from overlay_popup.offset_resolver import Alignment
from overlay_popup.placement import (
    MeasuredGeometry,
    Placement,
    compute_own_measured_position,
    compute_placement,
    compute_position,
)
from overlay_popup.popup_config import PopupConfig

ANCHOR = Rect.from_xywh(100, 50, 40, 20)


def _measured(overlay_size: Size) -> MeasuredGeometry:
    geometry = MeasuredGeometry()
    geometry.overlay_frame = Rect(Point(), overlay_size)
    geometry.overlay_measured = True
    return geometry


def test_bottom_edge_example_places_overlay_below_anchor():
    config = PopupConfig(attachment_anchor=RectAnchor(ANCHOR), attachment_edge=AttachmentEdge.BOTTOM)
    overlay_size = Size(60.0, 30.0)

    placement = compute_placement(config, _measured(overlay_size))

    assert placement.position == Point(120.0, 70.0)
    assert placement.render_offset == Size(0.0, 27.0)
    assert placement.top_left(overlay_size) == Point(90.0, 82.0)
    # Top edge of the overlay sits exactly edge_offset below the anchor.
    assert placement.frame(overlay_size).min_y - ANCHOR.max_y == pytest.approx(12.0)
    assert not placement.provisional


@pytest.mark.parametrize(
    "edge, axis",
    [
        (AttachmentEdge.TOP, "height"),
        (AttachmentEdge.BOTTOM, "height"),
        (AttachmentEdge.LEADING, "width"),
        (AttachmentEdge.TRAILING, "width"),
    ],
)
@pytest.mark.parametrize("overlay_size", [Size(60.0, 30.0), Size(11.0, 101.0), Size(0.0, 0.0)])
def test_render_offset_magnitude_along_edge_axis(edge, axis, overlay_size):
    config = PopupConfig(attachment_anchor=RectAnchor(ANCHOR), attachment_edge=edge, edge_offset=7.0)

    offset = compute_placement(config, _measured(overlay_size)).render_offset

    expected = getattr(overlay_size, axis) / 2 + 7.0
    if axis == "height":
        assert abs(offset.height) == pytest.approx(expected)
        assert offset.width == 0
    else:
        assert abs(offset.width) == pytest.approx(expected)
        assert offset.height == 0


def test_placement_is_idempotent():
    config = PopupConfig(attachment_edge=AttachmentEdge.TRAILING, alignment=Alignment.BOTTOM_TRAILING)
    geometry = _measured(Size(50.0, 10.0))
    geometry.anchor_value = Rect.from_xywh(0, 0, 80, 40)

    first = compute_placement(config, geometry)
    second = compute_placement(config, geometry)

    assert first == second


def test_explicit_alignment_combines_with_edge_offset():
    placement = compute_position(Point(10.0, 10.0), Size(20.0, 10.0), Size(1.0, 1.0), Size(5.0, 0.0))
    assert placement == Placement(position=Point(10.0, 10.0), render_offset=Size(15.0, 5.0))
    assert placement.center == Point(25.0, 15.0)


def test_unmeasured_overlay_is_provisional_and_uses_fixed_offset_only():
    config = PopupConfig(attachment_anchor=RectAnchor(ANCHOR), attachment_edge=AttachmentEdge.TOP)

    placement = compute_placement(config, MeasuredGeometry())

    assert placement.provisional
    assert placement.position == Point(120.0, 50.0)
    assert placement.render_offset == Size(0.0, -12.0)


def test_bounds_anchor_without_measurements_attaches_at_origin():
    placement = compute_placement(PopupConfig(attachment_anchor=BoundsAnchor()), MeasuredGeometry())
    assert placement.position == Point(0.0, 0.0)


def test_bounds_anchor_uses_measured_content_frame():
    geometry = _measured(Size(20.0, 20.0))
    geometry.anchor_value = Rect.from_xywh(0, 0, 40, 20)
    geometry.content_frame = ANCHOR
    geometry.content_frame_measured = True

    placement = compute_placement(PopupConfig(attachment_edge=AttachmentEdge.LEADING), geometry)

    assert placement.position == Point(100.0, 60.0)
    assert placement.render_offset == Size(-22.0, 0.0)


def test_own_measured_position_adds_signed_parent_size():
    assert compute_own_measured_position(Point(30.0, 40.0), ANCHOR, Size(0.0, 1.0)) == Point(30.0, 60.0)
    assert compute_own_measured_position(Point(30.0, 40.0), ANCHOR, Size(-1.0, -1.0)) == Point(-10.0, 20.0)


def test_own_measured_mode_uses_overlay_origin():
    config = PopupConfig(
        attachment_anchor=RectAnchor(ANCHOR),
        attachment_edge=AttachmentEdge.BOTTOM,
        own_measured_anchor=True,
    )
    geometry = MeasuredGeometry()

    first_frame = compute_placement(config, geometry)
    geometry.overlay_frame = Rect.from_xywh(5, 5, 60, 30)
    geometry.overlay_measured = True
    measured = compute_placement(config, geometry)

    # Before measurement the overlay origin is zero: a known-incorrect first frame.
    assert first_frame.provisional
    assert first_frame.position == Point(0.0, 20.0)
    # Bottom edge pushes down by the full anchor height.
    assert measured.position == Point(5.0, 25.0)
    assert measured.render_offset == Size(0.0, 27.0)


def test_own_measured_flag_ignored_for_bounds_anchor():
    config = PopupConfig(attachment_anchor=BoundsAnchor(), own_measured_anchor=True)
    assert not config.uses_own_measured_anchor


def test_geometry_reset_clears_overlay_and_anchor():
    geometry = _measured(Size(10.0, 10.0))
    geometry.anchor_value = ANCHOR
    geometry.content_frame = ANCHOR
    geometry.content_frame_measured = True

    geometry.invalidate_overlay()
    assert geometry.overlay_size == Size()
    assert not geometry.overlay_measured
    assert geometry.anchor_value == ANCHOR

    geometry.reset()
    assert geometry.anchor_value is None
    assert not geometry.content_frame_measured


def test_own_measured_mode_follows_explicit_alignment():
    config = PopupConfig(
        attachment_anchor=RectAnchor(ANCHOR),
        alignment=Alignment.TOP_TRAILING,
        own_measured_anchor=True,
    )
    geometry = _measured(Size(10.0, 10.0))
    geometry.overlay_frame = Rect.from_xywh(50, 50, 10, 10)

    placement = compute_placement(config, geometry)

    assert placement.position == Point(90.0, 30.0)


def test_unit_point_anchor_offset_by_measured_anchor_origin():
    geometry = _measured(Size(20.0, 20.0))
    geometry.content_frame = ANCHOR
    geometry.content_frame_measured = True
    config = PopupConfig(
        attachment_anchor=UnitPointAnchor(UnitPoint(0.5, 1.0)),
        alignment=Alignment.CENTER,
        edge_offset=0.0,
    )

    placement = compute_placement(config, geometry)

    assert placement.center == Point(120.0, 70.0)


def test_bounds_anchor_with_only_anchor_size_uses_zero_origin():
    geometry = MeasuredGeometry()
    geometry.content_frame = Rect(Point(), Size(40.0, 20.0))

    placement = compute_placement(PopupConfig(), geometry)

    assert placement.position == Point(20.0, 0.0)
