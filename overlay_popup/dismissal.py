"""Presentation/dismissal state for a popup, driven by a caller-owned binding.

The state machine never stores whether the popup is shown; it reads the
caller's binding every time. It only remembers the last identity it observed
so it can tell a content replacement apart from a fresh presentation. An item
whose identity is None still counts as presented.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, List, Optional, Union

_LOGGER = logging.getLogger("OverlayPopup.Dismissal")

_MISSING = object()


class PresentationState(str, Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"


class Transition(str, Enum):
    SHOWN = "shown"
    HIDDEN = "hidden"
    REPLACED = "replaced"


def _default_identity(item: Any) -> Hashable:
    identity = getattr(item, "id", _MISSING)
    if identity is _MISSING:
        return item
    return identity


@dataclass
class ItemBinding:
    """Popup is shown while ``get_fn()`` returns a non-None item."""

    get_fn: Callable[[], Any]
    set_fn: Callable[[Any], None]
    identity_fn: Callable[[Any], Hashable] = _default_identity

    def is_present(self) -> bool:
        return self.get_fn() is not None

    def identity(self) -> Optional[Hashable]:
        item = self.get_fn()
        if item is None:
            return None
        return self.identity_fn(item)

    def dismiss(self) -> None:
        self.set_fn(None)


@dataclass
class FlagBinding:
    """Popup is shown while ``get_fn()`` is truthy."""

    get_fn: Callable[[], bool]
    set_fn: Callable[[bool], None]

    def is_present(self) -> bool:
        return bool(self.get_fn())

    def identity(self) -> Optional[Hashable]:
        return True if self.is_present() else None

    def dismiss(self) -> None:
        self.set_fn(False)


PresentationBinding = Union[ItemBinding, FlagBinding]
TransitionListener = Callable[[Transition, Optional[Hashable]], None]


class DismissalStateMachine:
    """Tracks shown/hidden transitions and emits dismissals into the binding."""

    def __init__(
        self,
        binding: PresentationBinding,
        *,
        tap_outside_to_dismiss: bool = True,
        log_fn: Optional[Callable[..., None]] = None,
    ) -> None:
        if not isinstance(binding, (ItemBinding, FlagBinding)):
            raise TypeError(f"Unsupported presentation binding: {type(binding).__name__}")
        self._binding = binding
        self._tap_outside_to_dismiss = bool(tap_outside_to_dismiss)
        self._log_fn = log_fn or _LOGGER.debug
        self._listeners: List[TransitionListener] = []
        self._observed_identity: object = self._observe()

    @property
    def binding(self) -> PresentationBinding:
        return self._binding

    @property
    def state(self) -> PresentationState:
        return PresentationState.SHOWN if self._binding.is_present() else PresentationState.HIDDEN

    @property
    def is_shown(self) -> bool:
        return self.state is PresentationState.SHOWN

    @property
    def content_identity(self) -> Optional[Hashable]:
        return self._binding.identity()

    @property
    def tap_outside_to_dismiss(self) -> bool:
        return self._tap_outside_to_dismiss

    @tap_outside_to_dismiss.setter
    def tap_outside_to_dismiss(self, enabled: bool) -> None:
        self._tap_outside_to_dismiss = bool(enabled)

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def sync(self) -> Optional[Transition]:
        """Compare the binding with the last observation and announce any transition."""

        previous = self._observed_identity
        current = self._observe()
        self._observed_identity = current
        if previous is _MISSING and current is _MISSING:
            return None
        if previous is _MISSING:
            transition = Transition.SHOWN
        elif current is _MISSING:
            transition = Transition.HIDDEN
        elif previous != current:
            transition = Transition.REPLACED
        else:
            return None
        identity = None if current is _MISSING else current
        self._log(
            "Popup presentation %s (identity=%r previous=%r)",
            transition.value,
            identity,
            None if previous is _MISSING else previous,
        )
        self._notify(transition, identity)
        return transition

    def _observe(self) -> object:
        # Presence and identity are tracked apart; a present item may have a None identity.
        if not self._binding.is_present():
            return _MISSING
        return self._binding.identity()

    def handle_outside_interaction(self) -> bool:
        """Dismiss on an outside press when enabled; returns True if dismissed."""

        if not self._tap_outside_to_dismiss:
            self._log("Outside interaction ignored; tap_outside_to_dismiss disabled")
            return False
        return self._dismiss("outside_interaction")

    def handle_escape(self) -> bool:
        return self._dismiss("escape")

    def _dismiss(self, reason: str) -> bool:
        if not self._binding.is_present():
            return False
        self._log("Dismissing popup (reason=%s identity=%r)", reason, self._binding.identity())
        self._binding.dismiss()
        self.sync()
        return True

    def _notify(self, transition: Transition, identity: Optional[Hashable]) -> None:
        for listener in list(self._listeners):
            try:
                listener(transition, identity)
            except Exception:
                _LOGGER.exception("Popup transition listener failed for %s", transition.value)

    def _log(self, message: str, *args: object) -> None:
        try:
            self._log_fn(message, *args)
        except Exception:
            pass
