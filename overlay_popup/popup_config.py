"""Popup configuration and settings loader."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from overlay_popup.anchor_resolver import (
    AttachmentAnchor,
    AttachmentEdge,
    BoundsAnchor,
    RectAnchor,
    UnitPointAnchor,
    coerce_edge,
)
from overlay_popup.geometry import Rect, UnitPoint
from overlay_popup.offset_resolver import Alignment, coerce_alignment

_LOGGER = logging.getLogger("OverlayPopup.Config")

SETTINGS_ENV_VAR = "OVERLAY_POPUP_SETTINGS"
DEFAULT_EDGE_OFFSET = 12.0
DEFAULT_DISMISS_SHORTCUTS: tuple[str, ...] = ("Escape",)

_UNIT_POINT_TOKENS: Mapping[str, UnitPoint] = {
    "zero": UnitPoint.zero,  # type: ignore[attr-defined]
    "center": UnitPoint.center,  # type: ignore[attr-defined]
    "top": UnitPoint.top,  # type: ignore[attr-defined]
    "bottom": UnitPoint.bottom,  # type: ignore[attr-defined]
    "leading": UnitPoint.leading,  # type: ignore[attr-defined]
    "trailing": UnitPoint.trailing,  # type: ignore[attr-defined]
    "top_leading": UnitPoint.top_leading,  # type: ignore[attr-defined]
    "top_trailing": UnitPoint.top_trailing,  # type: ignore[attr-defined]
    "bottom_leading": UnitPoint.bottom_leading,  # type: ignore[attr-defined]
    "bottom_trailing": UnitPoint.bottom_trailing,  # type: ignore[attr-defined]
}


@dataclass(frozen=True)
class PopupConfig:
    """Everything the caller chooses about one popup presentation.

    ``alignment=None`` derives the push-out direction from the attachment
    edge. ``own_measured_anchor`` only applies to ``RectAnchor`` and positions
    the popup from its own measured origin instead of the abstract anchor.
    """

    attachment_anchor: AttachmentAnchor = BoundsAnchor()
    attachment_edge: AttachmentEdge = AttachmentEdge.TOP
    edge_offset: float = DEFAULT_EDGE_OFFSET
    alignment: Optional[Alignment] = None
    tap_outside_to_dismiss: bool = True
    own_measured_anchor: bool = False
    dismiss_shortcuts: tuple[str, ...] = DEFAULT_DISMISS_SHORTCUTS

    def with_changes(self, **changes: Any) -> "PopupConfig":
        return replace(self, **changes)

    @property
    def uses_own_measured_anchor(self) -> bool:
        return self.own_measured_anchor and isinstance(self.attachment_anchor, RectAnchor)


def _coerce_float(raw: object, fallback: float) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if value != value:
        return fallback
    return value


def _coerce_bool(raw: object, fallback: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    return fallback


def _coerce_pair(raw: object, keys: tuple[str, str]) -> Optional[tuple[float, float]]:
    if isinstance(raw, Mapping):
        values = (raw.get(keys[0]), raw.get(keys[1]))
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        values = (raw[0], raw[1])
    else:
        return None
    try:
        return float(values[0]), float(values[1])  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def coerce_anchor(value: object) -> Optional[AttachmentAnchor]:
    """Build an attachment anchor from a member or settings value.

    Accepted forms: an anchor instance, ``"bounds"``, a unit point token
    such as ``"top_leading"``, ``{"unit_point": [x, y]}``, or
    ``{"rect": [x, y, width, height]}``.
    """

    if isinstance(value, (RectAnchor, BoundsAnchor, UnitPointAnchor)):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token == "bounds":
            return BoundsAnchor()
        unit_point = _UNIT_POINT_TOKENS.get(token)
        if unit_point is not None:
            return UnitPointAnchor(unit_point)
        return None
    if isinstance(value, Mapping):
        if "unit_point" in value:
            pair = _coerce_pair(value.get("unit_point"), ("x", "y"))
            if pair is not None:
                return UnitPointAnchor(UnitPoint(*pair))
            return None
        rect_value = value.get("rect")
        if isinstance(rect_value, (list, tuple)) and len(rect_value) == 4:
            try:
                x, y, width, height = (float(part) for part in rect_value)
            except (TypeError, ValueError):
                return None
            return RectAnchor(Rect.from_xywh(x, y, width, height))
    return None


def _coerce_shortcuts(raw: object) -> Optional[tuple[str, ...]]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return None
    cleaned = [str(item).strip() for item in raw if isinstance(item, str)]
    return tuple(filter(None, cleaned))


def popup_config_from_mapping(data: Mapping[str, Any], *, base: Optional[PopupConfig] = None) -> PopupConfig:
    """Overlay settings values onto ``base``, ignoring anything unrecognised."""

    config = base or PopupConfig()
    if not isinstance(data, Mapping):
        return config
    changes: dict[str, Any] = {}
    if "attachment_edge" in data:
        edge = coerce_edge(data.get("attachment_edge"))
        if edge is not None:
            changes["attachment_edge"] = edge
        else:
            _LOGGER.debug("Ignoring unknown attachment_edge %r", data.get("attachment_edge"))
    if "alignment" in data:
        raw_alignment = data.get("alignment")
        if raw_alignment is None:
            changes["alignment"] = None
        else:
            alignment = coerce_alignment(raw_alignment)
            if alignment is not None:
                changes["alignment"] = alignment
            else:
                _LOGGER.debug("Ignoring unknown alignment %r", raw_alignment)
    if "attachment_anchor" in data:
        anchor = coerce_anchor(data.get("attachment_anchor"))
        if anchor is not None:
            changes["attachment_anchor"] = anchor
        else:
            _LOGGER.debug("Ignoring unknown attachment_anchor %r", data.get("attachment_anchor"))
    if "edge_offset" in data:
        changes["edge_offset"] = _coerce_float(data.get("edge_offset"), config.edge_offset)
    if "tap_outside_to_dismiss" in data:
        changes["tap_outside_to_dismiss"] = _coerce_bool(
            data.get("tap_outside_to_dismiss"), config.tap_outside_to_dismiss
        )
    if "own_measured_anchor" in data:
        changes["own_measured_anchor"] = _coerce_bool(data.get("own_measured_anchor"), config.own_measured_anchor)
    if "dismiss_shortcuts" in data:
        shortcuts = _coerce_shortcuts(data.get("dismiss_shortcuts"))
        if shortcuts is not None:
            changes["dismiss_shortcuts"] = shortcuts
    if not changes:
        return config
    return config.with_changes(**changes)


def resolve_settings_path(default: Optional[Path] = None) -> Optional[Path]:
    env_value = os.environ.get(SETTINGS_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return default


def load_popup_config(path: Optional[Path] = None, *, base: Optional[PopupConfig] = None) -> PopupConfig:
    """Read popup settings JSON, returning defaults when missing or malformed."""

    config = base or PopupConfig()
    target = resolve_settings_path(path)
    if target is None:
        return config
    try:
        raw_text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return config
    except OSError as exc:
        _LOGGER.debug("Unable to read popup settings %s: %s", target, exc)
        return config
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        _LOGGER.debug("Popup settings %s are not valid JSON: %s", target, exc)
        return config
    if not isinstance(data, dict):
        return config
    return popup_config_from_mapping(data, base=config)
