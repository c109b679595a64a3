"""Controller for one popup presentation (geometry cache, placement and dismissal).

This module stays free of Qt types; hosts inject thin adapters for applying
placements and toggling visibility, then forward measurement and input
events to the controller.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Optional, Tuple

from overlay_popup.dismissal import (
    DismissalStateMachine,
    PresentationBinding,
    PresentationState,
    Transition,
)
from overlay_popup.geometry import Rect, Size
from overlay_popup.placement import MeasuredGeometry, Placement, compute_placement
from overlay_popup.popup_config import PopupConfig

_LOGGER_NAME = "OverlayPopup.Controller"
_CONTROLLER_LOGGER = logging.getLogger(_LOGGER_NAME)

ApplyPlacementFn = Callable[[Placement, Rect], None]


class PopupController:
    """Owns the geometry cache of a single popup and keeps its placement current."""

    def __init__(
        self,
        binding: PresentationBinding,
        config: Optional[PopupConfig] = None,
        *,
        apply_placement_fn: ApplyPlacementFn,
        set_visible_fn: Optional[Callable[[bool], None]] = None,
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        self._config = config or PopupConfig()
        self._geometry = MeasuredGeometry()
        self._apply_placement = apply_placement_fn
        self._set_visible = set_visible_fn
        self._log_fn = log_fn or _CONTROLLER_LOGGER.debug
        self._placement: Optional[Placement] = None
        self._last_applied: Optional[Tuple[Placement, Rect]] = None
        self._provisional_logged = False
        self._dismissal = DismissalStateMachine(
            binding,
            tap_outside_to_dismiss=self._config.tap_outside_to_dismiss,
            log_fn=self._log_fn,
        )
        self._dismissal.add_listener(self._handle_transition)
        if self._dismissal.is_shown:
            self._toggle_visible(True)
            self.recompute_layout()

    # State ---------------------------------------------------------------

    @property
    def config(self) -> PopupConfig:
        return self._config

    @property
    def geometry(self) -> MeasuredGeometry:
        return self._geometry

    @property
    def dismissal(self) -> DismissalStateMachine:
        return self._dismissal

    @property
    def state(self) -> PresentationState:
        return self._dismissal.state

    @property
    def is_shown(self) -> bool:
        return self._dismissal.is_shown

    @property
    def content_identity(self) -> Optional[Hashable]:
        return self._dismissal.content_identity

    @property
    def placement(self) -> Optional[Placement]:
        return self._placement

    # Host layout notifications ------------------------------------------

    def anchor_value_changed(self, rect: Optional[Rect]) -> bool:
        if rect == self._geometry.anchor_value:
            return False
        self._geometry.anchor_value = rect
        self.recompute_layout()
        return True

    def anchor_frame_changed(self, rect: Rect) -> bool:
        geometry = self._geometry
        if geometry.content_frame_measured and rect == geometry.content_frame:
            return False
        geometry.content_frame = rect
        geometry.content_frame_measured = True
        self.recompute_layout()
        return True

    def anchor_size_changed(self, size: Size) -> bool:
        geometry = self._geometry
        if size == geometry.content_frame.size:
            return False
        geometry.content_frame = Rect(geometry.content_frame.origin, size)
        self.recompute_layout()
        return True

    def overlay_frame_changed(self, rect: Rect) -> bool:
        geometry = self._geometry
        if not self.is_shown:
            self._log("Discarding overlay measurement while hidden: %s", rect)
            return False
        if geometry.overlay_measured and rect == geometry.overlay_frame:
            return False
        geometry.overlay_frame = rect
        geometry.overlay_measured = True
        self.recompute_layout()
        return True

    def overlay_size_changed(self, size: Size) -> bool:
        geometry = self._geometry
        if not self.is_shown:
            self._log("Discarding overlay size while hidden: %s", size)
            return False
        if geometry.overlay_measured and size == geometry.overlay_frame.size:
            return False
        geometry.overlay_frame = Rect(geometry.overlay_frame.origin, size)
        geometry.overlay_measured = True
        self.recompute_layout()
        return True

    # Input and caller notifications -------------------------------------

    def outside_interaction(self) -> bool:
        return self._dismissal.handle_outside_interaction()

    def escape_triggered(self) -> bool:
        return self._dismissal.handle_escape()

    def presentation_changed(self) -> Optional[Transition]:
        """Call after mutating the bound item/flag from outside the controller."""

        return self._dismissal.sync()

    def update_config(self, config: Optional[PopupConfig] = None, **changes: Any) -> bool:
        updated = config or self._config
        if changes:
            updated = updated.with_changes(**changes)
        if updated == self._config:
            return False
        self._config = updated
        self._dismissal.tap_outside_to_dismiss = updated.tap_outside_to_dismiss
        self._log("Popup configuration updated: %s", updated)
        self.recompute_layout()
        return True

    # Layout --------------------------------------------------------------

    def recompute_layout(self) -> Optional[Placement]:
        """Recompute the placement and push it to the host when it changed."""

        if not self.is_shown:
            self._placement = None
            return None
        placement = compute_placement(self._config, self._geometry)
        self._placement = placement
        if placement.provisional and self._config.uses_own_measured_anchor and not self._provisional_logged:
            self._log(
                "Popup placed before its first measurement; first frame uses a zero origin (position=%s)",
                placement.position,
            )
            self._provisional_logged = True
        frame = placement.frame(self._geometry.overlay_size)
        if self._last_applied == (placement, frame):
            return placement
        self._last_applied = (placement, frame)
        try:
            self._apply_placement(placement, frame)
        except Exception:
            _CONTROLLER_LOGGER.exception("Failed to apply popup placement %s", placement)
        return placement

    def _handle_transition(self, transition: Transition, identity: Optional[Hashable]) -> None:
        # Overlay measurements never carry over between presentations or contents.
        self._geometry.invalidate_overlay()
        self._last_applied = None
        self._provisional_logged = False
        if transition is Transition.HIDDEN:
            self._placement = None
            self._toggle_visible(False)
            return
        if transition is Transition.SHOWN:
            self._toggle_visible(True)
        self.recompute_layout()

    def _toggle_visible(self, visible: bool) -> None:
        if self._set_visible is None:
            return
        try:
            self._set_visible(visible)
        except Exception:
            _CONTROLLER_LOGGER.exception("Failed to set popup visibility to %s", visible)

    def _log(self, message: str, *args: object) -> None:
        try:
            self._log_fn(message, *args)
        except Exception:
            pass
