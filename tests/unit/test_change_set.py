"""Unit tests for ChangeSet and ChangeSetElement."""

import pytest
from unittest.mock import AsyncMock

from chatweave.chat.change_set import ChangeSet
from chatweave.models.change_set import ChangeSetElement


def element(uri, **kwargs):
    return ChangeSetElement(uri=uri, **kwargs)


class TestChangeSetElement:
    """Test the element model."""

    def test_defaults(self):
        e = element("file:///src/a.py")
        assert e.state is None
        assert e.type is None
        assert e.accept is None

    def test_actions_are_stored_not_called(self):
        accept = AsyncMock()
        e = element("file:///src/a.py", state="pending", type="modify", accept=accept)

        ChangeSet("Edits", [e])

        assert e.accept is accept
        accept.assert_not_called()

    def test_rejects_unknown_state(self):
        with pytest.raises(Exception):  # Pydantic ValidationError
            element("file:///a.py", state="merged")

    def test_state_update_by_copy(self):
        e = element("file:///a.py", state="pending", data={"diff": "+1"})
        applied = e.model_copy(update={"state": "applied"})
        assert applied.state == "applied"
        assert applied.data == {"diff": "+1"}
        assert e.state == "pending"


class TestChangeSet:
    """Test change set mutations and notifications."""

    def test_initial_elements(self):
        change_set = ChangeSet("Refactor", [element("file:///a.py"), element("file:///b.py")])
        assert change_set.title == "Refactor"
        assert [e.uri for e in change_set.get_elements()] == ["file:///a.py", "file:///b.py"]

    def test_add_elements_fires_once(self, recorder):
        change_set = ChangeSet("Edits")
        change_set.on_did_change.subscribe(recorder)

        change_set.add_elements([element("file:///a.py"), element("file:///b.py")])
        change_set.add_element(element("file:///c.py"))

        assert len(change_set.get_elements()) == 3
        assert len(recorder.events) == 2

    def test_replace_keeps_position(self, recorder):
        change_set = ChangeSet("Edits", [element("file:///a.py"), element("file:///b.py"), element("file:///c.py")])
        change_set.on_did_change.subscribe(recorder)

        replaced = change_set.replace_element(element("file:///b.py", state="applied"))

        assert replaced is True
        assert [e.uri for e in change_set.get_elements()] == ["file:///a.py", "file:///b.py", "file:///c.py"]
        assert change_set.get_elements()[1].state == "applied"
        assert len(recorder.events) == 1

    def test_replace_without_match(self, recorder):
        change_set = ChangeSet("Edits", [element("file:///a.py")])
        change_set.on_did_change.subscribe(recorder)

        assert change_set.replace_element(element("file:///z.py")) is False
        assert [e.uri for e in change_set.get_elements()] == ["file:///a.py"]
        assert recorder.events == []

    def test_add_or_replace_appends_without_match(self, recorder):
        change_set = ChangeSet("Edits", [element("file:///a.py")])
        change_set.on_did_change.subscribe(recorder)

        change_set.add_or_replace_element(element("file:///z.py"))

        assert [e.uri for e in change_set.get_elements()] == ["file:///a.py", "file:///z.py"]
        assert len(recorder.events) == 1

    def test_add_or_replace_replaces_match(self):
        change_set = ChangeSet("Edits", [element("file:///a.py", type="add")])

        change_set.add_or_replace_element(element("file:///a.py", type="delete"))

        assert len(change_set.get_elements()) == 1
        assert change_set.get_elements()[0].type == "delete"

    def test_remove_element(self, recorder):
        change_set = ChangeSet("Edits", [element("file:///a.py"), element("file:///b.py")])
        change_set.on_did_change.subscribe(recorder)

        change_set.remove_element(0)

        assert [e.uri for e in change_set.get_elements()] == ["file:///b.py"]
        assert len(recorder.events) == 1

    def test_remove_out_of_range_raises(self):
        change_set = ChangeSet("Edits")
        with pytest.raises(IndexError):
            change_set.remove_element(3)
