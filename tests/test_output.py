"""Tests for MSBuild diagnostics and console output parsing."""

from unittest.mock import MagicMock

from buildsniffer_mcp.engine.diagnostics import (
    BuildDiagnostic,
    BuildErrorSeverity,
    parse_diagnostic,
)
from buildsniffer_mcp.engine.events import (
    ERROR_EVENT,
    MESSAGE_EVENT,
    WARNING_EVENT,
    EventSource,
)
from buildsniffer_mcp.engine.output import ENGINE_SENDER, MSBuildOutputParser


def make_parser():
    source = EventSource()
    handlers = {name: MagicMock() for name in (MESSAGE_EVENT, WARNING_EVENT, ERROR_EVENT)}
    for name, handler in handlers.items():
        source.on_event(name, handler)
    return MSBuildOutputParser(source), handlers


def messages(handler):
    return [(call.args[0].sender_name, call.args[0].message) for call in handler.call_args_list]


class TestParseDiagnostic:
    """Tests for diagnostic line parsing."""

    def test_parse_detailed_error(self):
        """Test parsing detailed error format."""
        line = "C:\\Project\\Test.cs(10,5): error CS0103: The name 'x' does not exist [C:\\Project\\Test.csproj]"

        diagnostic = parse_diagnostic(line)

        assert diagnostic.severity == BuildErrorSeverity.ERROR
        assert diagnostic.code == "CS0103"
        assert diagnostic.file == "C:\\Project\\Test.cs"
        assert diagnostic.line == 10
        assert diagnostic.column == 5
        assert diagnostic.project == "C:\\Project\\Test.csproj"

    def test_parse_tool_prefixed_error(self):
        """Test parsing MSBuild errors without a source location."""
        diagnostic = parse_diagnostic("MSBUILD : error MSB1009: Project file does not exist.")

        assert diagnostic.severity == BuildErrorSeverity.ERROR
        assert diagnostic.code == "MSB1009"
        assert diagnostic.message == "Project file does not exist."
        assert diagnostic.file is None

    def test_parse_simple_warning(self):
        """Test parsing warning without location."""
        diagnostic = parse_diagnostic("warning MSB4011: Imported twice")

        assert diagnostic.severity == BuildErrorSeverity.WARNING
        assert diagnostic.code == "MSB4011"

    def test_plain_text_is_not_diagnostic(self):
        """Test ordinary lines are not diagnostics."""
        assert parse_diagnostic("App.sln") is None
        assert parse_diagnostic("   ") is None

    def test_diagnostic_str(self):
        """Test rendering with location."""
        diagnostic = BuildDiagnostic(
            BuildErrorSeverity.ERROR, "CS0103", "Missing", file="Test.cs", line=3, column=7
        )
        assert str(diagnostic) == "Test.cs(3,7): error CS0103: Missing"

    def test_to_dict_minimal(self):
        """Test converting minimal diagnostic to dict."""
        d = BuildDiagnostic(BuildErrorSeverity.WARNING, "CS0168", "Unused").to_dict()
        assert d == {"severity": "warning", "code": "CS0168", "message": "Unused"}


class TestMSBuildOutputParser:
    """Tests for turning console output into events."""

    def test_task_output_attributed_to_task(self):
        """Test lines inside a task are sent by that task."""
        parser, handlers = make_parser()

        for line in [
            'Target "Build" in project "/tmp/sniffed.proj" (entry point):',
            'Task "Message"',
            "  App.sln;Lib.sln",
            'Done executing task "Message".',
            'Done building target "Build" in project "sniffed.proj".',
        ]:
            parser.feed(line + "\n")

        assert ("Message", "App.sln;Lib.sln") in messages(handlers[MESSAGE_EVENT])
        assert parser.current_task is None

    def test_lines_outside_tasks_sent_by_engine(self):
        """Test lines outside any task use the engine sender."""
        parser, handlers = make_parser()

        parser.feed("Build started 10/19/2026 10:00:00 AM.\n")

        assert messages(handlers[MESSAGE_EVENT]) == [
            (ENGINE_SENDER, "Build started 10/19/2026 10:00:00 AM.")
        ]

    def test_markers_are_not_messages(self):
        """Test task and target markers raise nothing."""
        parser, handlers = make_parser()

        parser.feed('Task "Message"\n')
        parser.feed('Done executing task "Message".\n')

        handlers[MESSAGE_EVENT].assert_not_called()

    def test_node_prefix_and_task_id_stripped(self):
        """Test multi-node and diagnostic decorations are removed."""
        parser, handlers = make_parser()

        parser.feed('  1>Task "Message" (TaskId:2)\n')
        parser.feed("  1>  App.sln (TaskId:2)\r\n")

        assert messages(handlers[MESSAGE_EVENT]) == [("Message", "App.sln")]

    def test_task_parameters_skipped(self):
        """Test diagnostic verbosity parameter dumps are ignored."""
        parser, handlers = make_parser()

        parser.feed('Task "Message"\n')
        parser.feed("Task Parameter:Text=App.sln\n")

        handlers[MESSAGE_EVENT].assert_not_called()

    def test_skipped_task_does_not_open_task(self):
        """Test a skipped task line does not change the current task."""
        parser, _ = make_parser()

        parser.feed('Task "Message" skipped, due to false condition; (false) was evaluated.\n')

        assert parser.current_task is None

    def test_diagnostics_raised_as_errors_and_warnings(self):
        """Test diagnostics go to error and warning handlers."""
        parser, handlers = make_parser()

        parser.feed('Task "Csc"\n')
        parser.feed("Program.cs(1,1): error CS1002: ; expected [App.csproj]\n")
        parser.feed("warning MSB4011: Imported twice\n")

        error_event = handlers[ERROR_EVENT].call_args.args[0]
        assert error_event.diagnostic.code == "CS1002"
        assert error_event.sender_name == "Csc"
        handlers[WARNING_EVENT].assert_called_once()
        handlers[MESSAGE_EVENT].assert_not_called()

    def test_blank_lines_ignored(self):
        """Test empty lines raise nothing."""
        parser, handlers = make_parser()

        parser.feed("\n")
        parser.feed("   \r\n")

        handlers[MESSAGE_EVENT].assert_not_called()
