"""Tests for summary rendering and recording."""

from __future__ import annotations

from ontogen.generator.summary import SummaryRecorder, SummaryTrace, summary_format, value_to_string
from ontogen.graph import ConceptGraph, DataType, Label


class TestSummaryFormat:
    """Rendering of single values."""

    def test_type_label_dashes_become_underscores(self, graph: ConceptGraph) -> None:
        assert summary_format(graph.put_role("foo-bar-baz")) == "foo_bar_baz"

    def test_instance_is_type_plus_id(self, graph: ConceptGraph) -> None:
        thing = graph.put_entity_type("foo").add_entity()
        assert summary_format(thing) == f"foo{thing.id}"

    def test_label_is_quoted(self) -> None:
        assert summary_format(Label("foo")) == '"foo"'

    def test_other_values_use_str(self) -> None:
        assert summary_format(True) == "True"
        assert summary_format(DataType.LONG) == str(DataType.LONG)
        assert summary_format(12) == "12"

    def test_value_to_string_quotes_strings_only(self) -> None:
        assert value_to_string('say "hi"') == '"say \\"hi\\""'
        assert value_to_string(3.5) == "3.5"


class TestSummaryRecorder:
    """Recording statements for one generation."""

    def test_begin_writes_header_and_resets(self) -> None:
        recorder = SummaryRecorder()
        recorder.begin(3)
        recorder.record("graph", "show_implicit_concepts", True)
        recorder.begin(0)
        assert str(recorder.trace) == "size: 0\n"
        assert len(recorder) == 0

    def test_plain_statement(self, graph: ConceptGraph) -> None:
        recorder = SummaryRecorder()
        recorder.begin(1)
        person = graph.put_entity_type("person")
        spouse = graph.put_role("spouse")
        recorder.record(person, "plays", spouse)
        assert recorder.trace.lines == ("person.plays(spouse);",)

    def test_assignment_statement(self, graph: ConceptGraph) -> None:
        recorder = SummaryRecorder()
        recorder.begin(1)
        person = graph.put_entity_type("person")
        alice = person.add_entity()
        recorder.record_assign(alice, person, "add_entity")
        assert recorder.trace.lines == (f"person{alice.id} = person.add_entity();",)

    def test_multiple_arguments_are_comma_separated(self, graph: ConceptGraph) -> None:
        recorder = SummaryRecorder()
        recorder.begin(1)
        recorder.record("marriage", "add_role_player", Label("spouse"), 7)
        assert recorder.trace.lines == ('marriage.add_role_player("spouse", 7);',)

    def test_trace_is_a_snapshot(self) -> None:
        """Recording after reading a trace does not change that trace."""
        recorder = SummaryRecorder()
        recorder.begin(2)
        recorder.record("graph", "show_implicit_concepts", False)
        trace = recorder.trace
        recorder.record("graph", "show_implicit_concepts", True)
        assert len(trace) == 1
        assert len(recorder.trace) == 2


class TestSummaryTrace:
    """Text form of a finished trace."""

    def test_lines_are_newline_terminated(self) -> None:
        trace = SummaryTrace(2, ("a.b();", "c.d();"))
        assert str(trace) == "size: 2\na.b();\nc.d();\n"

    def test_length_excludes_header(self) -> None:
        assert len(SummaryTrace(5)) == 0
        assert SummaryTrace(5).header == "size: 5"
