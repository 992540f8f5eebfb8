"""Screen navigation: exactly one of four screens is visible at a time."""

from enum import Enum
from typing import Any, Callable, Optional

from .session import SessionController, SessionEvent


class Screen(str, Enum):
    START = "start"
    LEVEL_SELECT = "level_select"
    GAME = "game"
    DEBRIEF = "debrief"


class ScreenNavigator:
    """Mutually exclusive screen visibility driven by session events."""

    def __init__(self, initial: Screen = Screen.START):
        self._active = initial
        self._listeners: list[Callable[[Screen], None]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> Screen:
        return self._active

    def is_visible(self, screen: Screen) -> bool:
        return self._active is screen

    def on_change(self, listener: Callable[[Screen], None]) -> None:
        self._listeners.append(listener)

    def show(self, screen: Screen) -> None:
        if screen is self._active:
            return
        self._active = screen
        for listener in list(self._listeners):
            listener(screen)

    def bind(self, controller: SessionController) -> None:
        """Follow the controller's lifecycle events."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = controller.subscribe(self._handle_event)

    def _handle_event(self, event: SessionEvent, payload: Any) -> None:
        if event is SessionEvent.LEVEL_STARTED:
            self.show(Screen.GAME)
        elif event is SessionEvent.MISSION_ENDED:
            self.show(Screen.DEBRIEF)
        elif event is SessionEvent.LEVEL_SELECT:
            self.show(Screen.LEVEL_SELECT)
