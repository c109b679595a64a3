"""Anchor-relative popup placement and dismissal."""

from overlay_popup.anchor_resolver import (
    AttachmentAnchor,
    AttachmentEdge,
    BoundsAnchor,
    RectAnchor,
    UnitPointAnchor,
    edge_multiplier,
    resolve_attachment_point,
)
from overlay_popup.dismissal import (
    DismissalStateMachine,
    FlagBinding,
    ItemBinding,
    PresentationState,
    Transition,
)
from overlay_popup.geometry import Point, Rect, Size, UnitPoint
from overlay_popup.offset_resolver import Alignment, resolve_direction_multiplier, resolve_fixed_offset
from overlay_popup.placement import (
    MeasuredGeometry,
    Placement,
    compute_own_measured_position,
    compute_placement,
    compute_position,
)
from overlay_popup.popup_config import PopupConfig, load_popup_config
from overlay_popup.popup_controller import PopupController

__version__ = "0.1.0"

__all__ = [
    "Alignment",
    "AttachmentAnchor",
    "AttachmentEdge",
    "BoundsAnchor",
    "DismissalStateMachine",
    "FlagBinding",
    "ItemBinding",
    "MeasuredGeometry",
    "Placement",
    "Point",
    "PopupConfig",
    "PopupController",
    "PresentationState",
    "Rect",
    "RectAnchor",
    "Size",
    "Transition",
    "UnitPoint",
    "UnitPointAnchor",
    "compute_own_measured_position",
    "compute_placement",
    "compute_position",
    "edge_multiplier",
    "load_popup_config",
    "resolve_attachment_point",
    "resolve_direction_multiplier",
    "resolve_fixed_offset",
    "__version__",
]
