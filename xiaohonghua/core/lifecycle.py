# xiaohonghua/core/lifecycle.py
from __future__ import annotations

import enum
from typing import Callable, List

from xiaohonghua.logging_setup import get_logger

logger = get_logger(__name__)


class AppPhase(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


Observer = Callable[[AppPhase, AppPhase], object]


class LifecycleMonitor:
    """
    Application lifecycle event source.

    Observers are called once per edge from ACTIVE to any other phase.
    INACTIVE -> BACKGROUND is not a new edge; going back to ACTIVE re-arms.
    """

    def __init__(self, phase: AppPhase = AppPhase.ACTIVE):
        self._phase = phase
        self._observers: List[Observer] = []

    @property
    def phase(self) -> AppPhase:
        return self._phase

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def transition(self, phase: AppPhase) -> bool:
        """Move to `phase`. Returns True when observers were notified."""
        old, self._phase = self._phase, phase
        if old is not AppPhase.ACTIVE or phase is AppPhase.ACTIVE:
            return False

        logger.debug("Lifecycle %s -> %s, notifying %d observer(s)", old.value, phase.value, len(self._observers))
        for observer in list(self._observers):
            try:
                observer(old, phase)
            except Exception:
                # an observer must never take the foreground app down
                logger.exception("Lifecycle observer %r failed", observer)
        return True
