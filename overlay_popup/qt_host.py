"""PyQt6 adapter wiring widget geometry and input events into a PopupController."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QEvent, QObject, QPoint, QRect, Qt
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import QApplication, QWidget

from overlay_popup.dismissal import PresentationBinding
from overlay_popup.geometry import Point, Rect, Size
from overlay_popup.logging_utils import configure_logging
from overlay_popup.placement import Placement
from overlay_popup.popup_config import PopupConfig
from overlay_popup.popup_controller import PopupController

_QT_LOGGER = logging.getLogger("OverlayPopup.Qt")

_ANCHOR_EVENTS = {QEvent.Type.Resize, QEvent.Type.Move, QEvent.Type.Show}


class QtPopupHost(QObject):
    """Positions ``overlay`` next to ``anchor`` and dismisses it on outside presses.

    Geometry is expressed in the coordinate space of the overlay's parent
    widget (or global coordinates for a top-level overlay). Outside presses
    are observed, never consumed, so the pressed widget still handles them.
    Pass ``log_to_file`` to route the package loggers to a rotating log file.
    """

    def __init__(
        self,
        anchor: QWidget,
        overlay: QWidget,
        binding: PresentationBinding,
        config: Optional[PopupConfig] = None,
        *,
        log_to_file: bool = False,
        debug_logging: bool = False,
        log_dir: Optional[Path] = None,
    ) -> None:
        super().__init__(overlay)
        if log_to_file:
            configure_logging(debug_enabled=debug_logging, log_dir=log_dir)
        self._anchor = anchor
        self._overlay = overlay
        self._controller: Optional[PopupController] = None
        self._shortcuts: List[QShortcut] = []
        self._app = QApplication.instance()

        anchor.installEventFilter(self)
        overlay.installEventFilter(self)
        if self._app is not None:
            self._app.installEventFilter(self)
        else:
            _QT_LOGGER.warning("No QApplication instance; outside presses will not dismiss the popup")

        overlay.hide()
        self._controller = PopupController(
            binding,
            config,
            apply_placement_fn=self.apply_placement,
            set_visible_fn=self.set_visible,
            log_fn=_QT_LOGGER.debug,
        )
        self._install_shortcuts(self._controller.config.dismiss_shortcuts)
        self.report_anchor_geometry()
        if self._controller.is_shown:
            self.report_overlay_size()

    @property
    def controller(self) -> PopupController:
        assert self._controller is not None
        return self._controller

    # Outbound ------------------------------------------------------------

    def apply_placement(self, placement: Placement, frame: Rect) -> None:
        self._overlay.move(int(round(frame.origin.x)), int(round(frame.origin.y)))

    def set_visible(self, visible: bool) -> None:
        self._overlay.setVisible(visible)
        if visible:
            self._overlay.raise_()
            self.report_overlay_size()
        for shortcut in self._shortcuts:
            shortcut.setEnabled(visible)

    # Inbound -------------------------------------------------------------

    def report_anchor_geometry(self) -> None:
        if self._controller is None:
            return
        top_left = self._map_to_overlay_space(self._anchor, QPoint(0, 0))
        size = self._anchor.size()
        rect = Rect.from_xywh(top_left.x(), top_left.y(), size.width(), size.height())
        self._controller.anchor_frame_changed(rect)
        self._controller.anchor_value_changed(Rect(Point(), rect.size))

    def report_overlay_size(self) -> None:
        if self._controller is None:
            return
        hint = self._overlay.size()
        if hint.isEmpty():
            hint = self._overlay.sizeHint()
        self._controller.overlay_size_changed(Size(float(hint.width()), float(hint.height())))

    def update_config(self, config: PopupConfig) -> None:
        previous = self.controller.config.dismiss_shortcuts
        self.controller.update_config(config)
        if config.dismiss_shortcuts != previous:
            self._install_shortcuts(config.dismiss_shortcuts)

    def detach(self) -> None:
        self._anchor.removeEventFilter(self)
        self._overlay.removeEventFilter(self)
        if self._app is not None:
            self._app.removeEventFilter(self)
        self._clear_shortcuts()

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if self._controller is None:
            return False
        event_type = event.type()
        if watched is self._anchor and event_type in _ANCHOR_EVENTS:
            self.report_anchor_geometry()
        elif watched is self._overlay and event_type == QEvent.Type.Resize:
            self.report_overlay_size()
        elif event_type == QEvent.Type.MouseButtonPress and isinstance(watched, QWidget):
            self._handle_press(event)
        return False

    # Helpers -------------------------------------------------------------

    def _handle_press(self, event: QEvent) -> None:
        controller = self._controller
        if controller is None or not controller.is_shown or not self._overlay.isVisible():
            return
        global_pos = event.globalPosition().toPoint()  # type: ignore[attr-defined]
        overlay_rect = QRect(self._overlay.mapToGlobal(QPoint(0, 0)), self._overlay.size())
        if overlay_rect.contains(global_pos):
            return
        _QT_LOGGER.debug("Outside press at (%d,%d); overlay=%s", global_pos.x(), global_pos.y(), overlay_rect)
        controller.outside_interaction()

    def _map_to_overlay_space(self, widget: QWidget, point: QPoint) -> QPoint:
        global_point = widget.mapToGlobal(point)
        parent = self._overlay.parentWidget()
        if parent is None:
            return global_point
        return parent.mapFromGlobal(global_point)

    def _install_shortcuts(self, sequences) -> None:
        self._clear_shortcuts()
        # A top-level overlay is its own window, so bind on both windows when they differ.
        hosts: List[QWidget] = [self._anchor.window()]
        overlay_window = self._overlay.window()
        if overlay_window is not hosts[0]:
            hosts.append(overlay_window)
        visible = self.controller.is_shown
        for sequence in sequences:
            key_sequence = QKeySequence(sequence)
            if key_sequence.isEmpty():
                _QT_LOGGER.debug("Ignoring empty dismiss shortcut %r", sequence)
                continue
            for host in hosts:
                shortcut = QShortcut(key_sequence, host)
                shortcut.setContext(Qt.ShortcutContext.WindowShortcut)
                shortcut.activated.connect(self._handle_shortcut)
                shortcut.setEnabled(visible)
                self._shortcuts.append(shortcut)

    def _clear_shortcuts(self) -> None:
        for shortcut in self._shortcuts:
            shortcut.setEnabled(False)
            shortcut.setParent(None)
            shortcut.deleteLater()
        self._shortcuts = []

    def _handle_shortcut(self) -> None:
        if self._controller is not None:
            self._controller.escape_triggered()
