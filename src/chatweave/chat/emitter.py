"""Synchronous publish/subscribe channel used by every chat entity.

Listeners run in registration order, inside the call that fired the event,
after the mutation is fully applied. A listener must not mutate the entity it
is listening to from within the callback; schedule the mutation instead.

An exception raised by a listener is logged and swallowed so that the
mutating caller and the remaining listeners are unaffected.
"""

from typing import Callable, Generic, Optional, TypeVar

from chatweave.utils.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``Emitter.subscribe``; call ``dispose()`` to unsubscribe."""

    def __init__(self, dispose: Callable[[], None]):
        self._dispose: Optional[Callable[[], None]] = dispose

    def dispose(self) -> None:
        if self._dispose is not None:
            self._dispose()
            self._dispose = None

    @property
    def disposed(self) -> bool:
        return self._dispose is None


class Emitter(Generic[T]):
    """Typed event channel with synchronous, in-call delivery."""

    def __init__(self, name: str = "emitter"):
        self._name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        """
        Register a listener.

        Args:
            listener: Called with each fired event

        Returns:
            Subscription that removes the listener when disposed
        """
        self._listeners.append(listener)

        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # Already removed

        return Subscription(remove)

    def fire(self, event: T) -> None:
        """Deliver an event to every listener registered at the time of the call."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    "listener_failed",
                    emitter=self._name,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                    exc_info=True,
                )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
