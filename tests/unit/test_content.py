"""Unit tests for response content kinds and the capability table."""

import pytest
from unittest.mock import Mock

from chatweave.models.content import (
    COMMAND_CHAT_RESPONSE_COMMAND,
    ChatResponseContent,
    CodeChatResponseContent,
    CodeLocation,
    Command,
    CommandChatResponseContent,
    CustomCallback,
    ErrorChatResponseContent,
    HorizontalLayoutChatResponseContent,
    InformationalChatResponseContent,
    MarkdownChatResponseContent,
    NO_CAPABILITIES,
    QuestionOption,
    QuestionResponseContent,
    TextChatResponseContent,
    ToolCallChatResponseContent,
    capabilities_for,
    content_as_string,
    register_content_kind,
    unregister_content_kind,
)


class TestTextContent:
    """Test plain text content."""

    def test_merge_concatenates(self):
        text = TextChatResponseContent(content="Hello, ")
        assert text.merge(TextChatResponseContent(content="world")) is True
        assert text.content == "Hello, world"

    def test_string_forms_are_raw_text(self):
        text = TextChatResponseContent(content="abc")
        assert text.as_string() == "abc"
        assert text.as_display_string() == "abc"


class TestMarkdownContent:
    """Test markdown content."""

    def test_merge_appends_markdown(self):
        md = MarkdownChatResponseContent(content="# Title\n")
        assert md.merge(MarkdownChatResponseContent(content="Some *text*")) is True
        assert md.as_string() == "# Title\nSome *text*"


class TestInformationalContent:
    """Test informational content."""

    def test_merge_appends_but_never_has_a_string(self):
        info = InformationalChatResponseContent(content="Searching")
        assert info.merge(InformationalChatResponseContent(content="...")) is True
        assert info.content == "Searching..."
        assert info.as_string() is None

    def test_has_no_display_capability(self):
        caps = capabilities_for(InformationalChatResponseContent(content="x"))
        assert caps.as_display_string is None
        assert caps.as_string is not None


class TestCodeContent:
    """Test code block content."""

    def test_as_string_is_fenced_block(self):
        code = CodeChatResponseContent(code="print(1)", language="python")
        assert code.as_string() == "```python\nprint(1)\n```"

    def test_as_string_without_language(self):
        code = CodeChatResponseContent(code="ls -la")
        assert code.as_string() == "```\nls -la\n```"

    def test_merge_concatenates_verbatim(self):
        code = CodeChatResponseContent(code="def f():\n", language="python")
        assert code.merge(CodeChatResponseContent(code="    return 1")) is True
        assert code.code == "def f():\n    return 1"
        assert code.language == "python"

    def test_location(self):
        location = CodeLocation(uri="file:///src/app.py", line=10, character=4)
        code = CodeChatResponseContent(code="x = 1", location=location)
        assert code.location.line == 10

    def test_location_rejects_negative_line(self):
        with pytest.raises(Exception):  # Pydantic ValidationError
            CodeLocation(uri="file:///a.py", line=-1)


class TestHorizontalLayoutContent:
    """Test horizontal layout content."""

    def test_merge_splices_children_of_another_layout(self):
        layout = HorizontalLayoutChatResponseContent(content=[TextChatResponseContent(content="a")])
        other = HorizontalLayoutChatResponseContent(
            content=[TextChatResponseContent(content="b"), TextChatResponseContent(content="c")]
        )

        assert layout.merge(other) is True
        assert [child.content for child in layout.content] == ["a", "b", "c"]

    def test_merge_appends_other_kinds_as_child(self):
        layout = HorizontalLayoutChatResponseContent()
        command = CommandChatResponseContent(command=Command(id="editor.save"))

        assert layout.merge(command) is True
        assert layout.content == [command]
        assert layout.content[0] is command

    def test_as_string_joins_children_with_space(self):
        layout = HorizontalLayoutChatResponseContent(
            content=[
                CommandChatResponseContent(command=Command(id="a.run")),
                CommandChatResponseContent(command=Command(id="b.run")),
            ]
        )
        assert layout.as_string() == "a.run b.run"
        assert layout.as_display_string() == "a.run b.run"

    def test_children_without_string_contribute_empty(self):
        layout = HorizontalLayoutChatResponseContent(
            content=[TextChatResponseContent(content="x"), InformationalChatResponseContent(content="y")]
        )
        assert layout.as_string() == "x "

    def test_children_keep_their_identity(self):
        child = TextChatResponseContent(content="x")
        layout = HorizontalLayoutChatResponseContent(content=[child])
        assert layout.content[0] is child


class TestToolCallContent:
    """Test tool call content."""

    def test_same_id_adopts_finished_and_result(self):
        call = ToolCallChatResponseContent(id="t1", name="foo", arguments="{}")
        update = ToolCallChatResponseContent(id="t1", finished=True, result="ok")

        assert call.merge(update) is True
        assert call.finished is True
        assert call.result == "ok"
        assert call.arguments == "{}"

    def test_same_id_accumulates_argument_fragment(self):
        call = ToolCallChatResponseContent(id="t1", name="foo")
        assert call.merge(ToolCallChatResponseContent(id="t1", arguments='{"x":1}')) is True
        assert call.arguments == '{"x":1}'
        assert call.name == "foo"

    def test_named_fragment_with_other_id_is_refused(self):
        call = ToolCallChatResponseContent(id="t1", name="foo")
        assert call.merge(ToolCallChatResponseContent(id="t2", name="bar")) is False
        assert call.name == "foo"

    def test_fragment_without_arguments_is_refused(self):
        call = ToolCallChatResponseContent(id="t1", name="foo", arguments="{")
        assert call.merge(ToolCallChatResponseContent()) is False
        assert call.arguments == "{"

    def test_anonymous_argument_fragment_is_appended(self):
        call = ToolCallChatResponseContent(id="t1", name="foo", arguments='{"a"')
        assert call.merge(ToolCallChatResponseContent(arguments=": 1}")) is True
        assert call.arguments == '{"a": 1}'

    def test_string_forms(self):
        call = ToolCallChatResponseContent(id="t1", name="search", arguments='{"q":"x"}')
        assert call.as_string() == ""
        assert call.as_display_string() == 'Tool call: search({"q":"x"})'

    def test_display_string_without_arguments(self):
        call = ToolCallChatResponseContent(id="t1", name="now")
        assert call.as_display_string() == "Tool call: now()"

    def test_finished_defaults_to_false(self):
        assert ToolCallChatResponseContent(id="t1").finished is False


class TestCommandContent:
    """Test command content."""

    def test_as_string_prefers_command_id(self):
        content = CommandChatResponseContent(
            command=Command(id="workbench.open"),
            custom_callback=CustomCallback(label="Open", callback=Mock()),
        )
        assert content.as_string() == "workbench.open"

    def test_as_string_falls_back_to_callback_label(self):
        content = CommandChatResponseContent(custom_callback=CustomCallback(label="Apply", callback=Mock()))
        assert content.as_string() == "Apply"

    def test_as_string_default(self):
        assert CommandChatResponseContent().as_string() == "command"

    def test_arguments_default_to_empty(self):
        assert CommandChatResponseContent(command=COMMAND_CHAT_RESPONSE_COMMAND).arguments == []

    def test_has_no_merge_capability(self):
        assert capabilities_for(CommandChatResponseContent()).merge is None


class TestQuestionContent:
    """Test question content."""

    def make_question(self, request=None):
        return QuestionResponseContent(
            question="Proceed?",
            options=[QuestionOption(text="Yes", value="y"), QuestionOption(text="No")],
            handler=Mock(),
            request=request or Mock(),
        )

    def test_as_string_without_answer(self):
        assert self.make_question().as_string() == "Question: Proceed?\nNo answer"

    def test_answer_records_option_and_refreshes_response(self):
        request = Mock()
        question = self.make_question(request)

        question.answer(question.options[0])

        assert question.selected_option.value == "y"
        assert question.as_string() == "Question: Proceed?\nAnswer: Yes"
        request.response.response.response_content_changed.assert_called_once()

    def test_answer_does_not_invoke_handler(self):
        question = self.make_question()
        question.answer(question.options[1])
        question.handler.assert_not_called()

    def test_never_merges(self):
        question = self.make_question()
        assert question.merge(self.make_question()) is False


class TestErrorContent:
    """Test error content."""

    def test_wraps_exception_without_string(self):
        content = ErrorChatResponseContent(error=RuntimeError("boom"))
        assert str(content.error) == "boom"
        assert content.as_string() is None
        assert capabilities_for(content).merge is None


class TestCapabilityTable:
    """Test the kind -> capabilities table."""

    def test_unknown_kind_has_no_capabilities(self):
        assert capabilities_for(ChatResponseContent(kind="unregistered")) is NO_CAPABILITIES
        assert content_as_string(ChatResponseContent(kind="unregistered")) is None

    def test_object_without_kind_has_no_capabilities(self):
        assert capabilities_for(object()) is NO_CAPABILITIES

    def test_register_new_kind(self):
        register_content_kind("test-badge", as_string=lambda c: "[badge]")
        try:
            assert content_as_string(ChatResponseContent(kind="test-badge")) == "[badge]"
            assert capabilities_for(ChatResponseContent(kind="test-badge")).merge is None
        finally:
            unregister_content_kind("test-badge")

        assert capabilities_for(ChatResponseContent(kind="test-badge")) is NO_CAPABILITIES

    def test_unregister_unknown_kind(self):
        assert unregister_content_kind("never-registered") is None

    def test_as_string_is_pure_function_of_state(self):
        code = CodeChatResponseContent(code="x", language="py")
        assert code.as_string() == code.as_string()
        call = ToolCallChatResponseContent(id="t", name="n", arguments="{}")
        assert call.as_display_string() == call.as_display_string()
