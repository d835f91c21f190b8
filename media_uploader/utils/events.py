from typing import Callable, Dict, List
import asyncio
import logging
logger = logging.getLogger(__name__)

# Event names emitted by the pipeline and the list reconciler
CHANGE = "change"                        # (entries)
TASK_STATE = "task_state"                # (task)
VALIDATION_FAILED = "validation_failed"  # (ValidationError)
BATCH_FAILED = "batch_failed"            # (failed_count, message)
BATCH_SETTLED = "batch_settled"          # (BatchResult)


class EventEmitter:
    """
    Event emitter for list and upload events.

    Listeners may be plain callables or coroutine functions. Listeners run in
    subscription order; an exception in one is logged and the rest still run.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        listeners = self._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs):
        """Emit an event to all listeners."""
        # Snapshot: listeners may unsubscribe while being called
        for callback in list(self._listeners.get(event_name, [])):
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback(*args, **kwargs)
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")
