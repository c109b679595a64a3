from __future__ import annotations

import types

import pytest
from PyQt6.QtCore import QEvent, QPoint, QPointF, Qt
from PyQt6.QtGui import QMouseEvent
from PyQt6.QtWidgets import QApplication, QWidget

from overlay_popup.anchor_resolver import AttachmentEdge, UnitPointAnchor
from overlay_popup.dismissal import FlagBinding
from overlay_popup.geometry import UnitPoint
from overlay_popup.offset_resolver import Alignment
from overlay_popup.popup_config import PopupConfig
from overlay_popup import qt_host
from overlay_popup.qt_host import QtPopupHost


@pytest.fixture
def qt_app():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


def _build_host(qt_app, *, shown=True, config=None):
    window = QWidget()
    window.resize(400, 300)
    anchor = QWidget(window)
    anchor.setGeometry(100, 50, 40, 20)
    overlay = QWidget(window)
    overlay.resize(60, 30)
    store = types.SimpleNamespace(value=shown)
    binding = FlagBinding(get_fn=lambda: store.value, set_fn=lambda value: setattr(store, "value", value))
    host = QtPopupHost(anchor, overlay, binding, config or PopupConfig(attachment_edge=AttachmentEdge.BOTTOM))
    window.show()
    qt_app.processEvents()
    return window, anchor, overlay, host, store


def _press(widget: QWidget, pos: QPoint) -> QMouseEvent:
    local = QPointF(pos)
    global_pos = QPointF(widget.mapToGlobal(pos))
    return QMouseEvent(
        QEvent.Type.MouseButtonPress,
        local,
        global_pos,
        Qt.MouseButton.LeftButton,
        Qt.MouseButton.LeftButton,
        Qt.KeyboardModifier.NoModifier,
    )


@pytest.mark.pyqt_required
def test_overlay_positioned_below_anchor(qt_app):
    window, _, overlay, host, _ = _build_host(qt_app)
    try:
        host.report_anchor_geometry()
        assert overlay.isVisible()
        assert (overlay.x(), overlay.y()) == (90, 82)
        assert host.controller.placement is not None
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_outside_press_dismisses_without_consuming(qt_app):
    window, anchor, overlay, host, store = _build_host(qt_app)
    try:
        event = _press(window, QPoint(5, 5))
        consumed = host.eventFilter(window, event)
        assert consumed is False
        assert store.value is False
        assert not overlay.isVisible()
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_inside_press_keeps_popup(qt_app):
    window, _, overlay, host, store = _build_host(qt_app)
    try:
        event = _press(overlay, QPoint(10, 10))
        host.eventFilter(overlay, event)
        assert store.value is True
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_outside_press_ignored_when_disabled(qt_app):
    config = PopupConfig(attachment_edge=AttachmentEdge.BOTTOM, tap_outside_to_dismiss=False)
    window, _, _, host, store = _build_host(qt_app, config=config)
    try:
        host.eventFilter(window, _press(window, QPoint(5, 5)))
        assert store.value is True
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_dismiss_shortcut_hides_popup(qt_app):
    window, _, overlay, host, store = _build_host(qt_app)
    try:
        assert host._shortcuts
        host._shortcuts[0].activated.emit()
        assert store.value is False
        assert not overlay.isVisible()
        assert not host._shortcuts[0].isEnabled()
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_presenting_later_shows_overlay(qt_app):
    window, _, overlay, host, store = _build_host(qt_app, shown=False)
    try:
        assert not overlay.isVisible()
        store.value = True
        host.controller.presentation_changed()
        assert overlay.isVisible()
        assert (overlay.x(), overlay.y()) == (90, 82)
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_unit_point_anchor_follows_anchor_widget_origin(qt_app):
    config = PopupConfig(
        attachment_anchor=UnitPointAnchor(UnitPoint(0.5, 1.0)),
        alignment=Alignment.CENTER,
        edge_offset=0.0,
    )
    window, _, overlay, host, _ = _build_host(qt_app, config=config)
    try:
        host.report_anchor_geometry()
        # Bottom centre of the anchor at (100, 50, 40, 20).
        assert (overlay.x() + 30, overlay.y() + 15) == (120, 70)
    finally:
        host.detach()
        window.close()


@pytest.mark.pyqt_required
def test_top_level_overlay_gets_its_own_dismiss_shortcut(qt_app):
    window = QWidget()
    window.resize(400, 300)
    anchor = QWidget(window)
    anchor.setGeometry(100, 50, 40, 20)
    overlay = QWidget()
    overlay.resize(60, 30)
    store = types.SimpleNamespace(value=True)
    binding = FlagBinding(get_fn=lambda: store.value, set_fn=lambda value: setattr(store, "value", value))
    host = QtPopupHost(anchor, overlay, binding)
    window.show()
    qt_app.processEvents()
    try:
        overlay_shortcuts = [shortcut for shortcut in host._shortcuts if shortcut.parent() is overlay]
        assert overlay_shortcuts
        assert any(shortcut.parent() is window for shortcut in host._shortcuts)

        overlay_shortcuts[0].activated.emit()
        assert store.value is False
        assert not overlay.isVisible()
    finally:
        host.detach()
        overlay.close()
        window.close()


@pytest.mark.pyqt_required
def test_log_to_file_configures_package_logging(qt_app, monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(qt_host, "configure_logging", lambda **kwargs: calls.append(kwargs))

    window, _, _, host, _ = _build_host(qt_app)
    host.detach()
    assert calls == []

    anchor = QWidget(window)
    overlay = QWidget(window)
    binding = FlagBinding(get_fn=lambda: False, set_fn=lambda value: None)
    other = QtPopupHost(anchor, overlay, binding, log_to_file=True, debug_logging=True, log_dir=tmp_path)
    try:
        assert calls == [{"debug_enabled": True, "log_dir": tmp_path}]
    finally:
        other.detach()
        window.close()
