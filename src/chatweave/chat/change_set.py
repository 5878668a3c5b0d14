"""Observable collection of proposed file edits."""

from typing import Iterable, Optional

from chatweave.chat.emitter import Emitter
from chatweave.models.change_set import ChangeSetElement
from chatweave.utils.logging import get_logger


logger = get_logger(__name__)


class ChangeSet:
    """
    Ordered list of ChangeSetElements keyed by uri.

    Each mutating call notifies ``on_did_change`` exactly once, however many
    elements it touches. Elements are immutable; to change an element's state,
    replace it with an updated copy::

        change_set.replace_element(element.model_copy(update={"state": "applied"}))
    """

    def __init__(self, title: str, elements: Optional[Iterable[ChangeSetElement]] = None):
        self.title = title
        self.on_did_change: Emitter[None] = Emitter("change_set")
        self._elements: list[ChangeSetElement] = list(elements or [])

    def get_elements(self) -> list[ChangeSetElement]:
        return self._elements

    def add_element(self, element: ChangeSetElement) -> None:
        self.add_elements([element])

    def add_elements(self, elements: Iterable[ChangeSetElement]) -> None:
        added = list(elements)
        self._elements.extend(added)
        logger.debug("change_set_elements_added", title=self.title, count=len(added))
        self.notify_change()

    def replace_element(self, element: ChangeSetElement) -> bool:
        """
        Replace the element with the same uri, keeping its position.

        Returns:
            False (and no notification) if no element has that uri
        """
        index = self._index_of(element.uri)
        if index is None:
            return False
        self._elements[index] = element
        logger.debug("change_set_element_replaced", title=self.title, uri=element.uri)
        self.notify_change()
        return True

    def add_or_replace_element(self, element: ChangeSetElement) -> None:
        if not self.replace_element(element):
            self.add_element(element)

    def remove_element(self, index: int) -> None:
        """Remove the element at ``index``."""
        removed = self._elements.pop(index)
        logger.debug("change_set_element_removed", title=self.title, uri=removed.uri)
        self.notify_change()

    def notify_change(self) -> None:
        self.on_did_change.fire(None)

    def _index_of(self, uri: str) -> Optional[int]:
        target = str(uri)
        return next((i for i, e in enumerate(self._elements) if str(e.uri) == target), None)
