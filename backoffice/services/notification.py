import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveChangeEvent:
    action: str  # submit, approve, deny, bulk_approve, bulk_deny, auto_approve
    ids: Tuple[str, ...] = field(default_factory=tuple)


LeaveObserver = Callable[[LeaveChangeEvent], None]


class LeaveNotifier:
    """
    In-process observer registry for "the leave set changed" signals.
    Fire-and-forget: an observer that raises is logged and skipped, the
    mutation that triggered it is never affected.
    """

    def __init__(self):
        self._observers: List[LeaveObserver] = []
        self._lock = threading.Lock()

    def subscribe(self, observer: LeaveObserver) -> LeaveObserver:
        with self._lock:
            self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: LeaveObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def publish(self, event: LeaveChangeEvent) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception as e:
                # Don't fail the request if notification fails
                logger.warning(f"Leave observer failed for {event.action}: {e}", exc_info=True)


def log_leave_change(event: LeaveChangeEvent) -> None:
    logger.info(f"Leaves updated: {event.action}", extra={"leave_ids": list(event.ids)})
