# tests/status_ui/test_renderers.py

import copy

import pytest

from flowrun.core.exceptions import NodeExecutionError
from flowrun.status_ui.renderers import (
    render_run_notification,
    render_states,
    render_table_html,
)
from tests.fixtures.invokers import RecordingInvoker


def test_render_table_html_basic():
    html = render_table_html([{"node": "a", "status": "success"}], ("node", "status"), title="run")
    assert "<table>" in html
    assert "run" in html
    assert "<th>node</th>" in html
    assert "data-status='success'" in html


def test_render_table_html_empty():
    assert "(empty)" in render_table_html([], ("node",))


def test_render_states_after_success(make_engine, chain_definition):
    result = make_engine(RecordingInvoker()).run(chain_definition["nodes"], chain_definition["edges"])
    out = render_states(result.states, title="states")
    assert out.html.count("<tr data-status='success'>") == 3
    lines = out.text.splitlines()
    assert lines[0].split() == ["node", "status", "duration_ms", "error"]
    assert lines[1].split() == ["n1", "success", "1000", "-"]


def test_render_states_escapes_error_message(make_engine):
    engine = make_engine(RecordingInvoker(fail_on={"a"}, error=ValueError("<script>")))
    with pytest.raises(NodeExecutionError) as ei:
        engine.run([{"id": "a"}, {"id": "b"}], [{"source": "a", "target": "b"}])
    out = render_states(ei.value.result.states)
    assert "&lt;script&gt;" in out.html
    assert "<script>" not in out.html
    assert "idle" in out.text


def test_notification_success(make_engine):
    result = make_engine(RecordingInvoker()).run([{"id": "a"}, {"id": "b"}], [])
    out = render_run_notification(result)
    assert out.text == "Workflow executed successfully (2/2 nodes)"
    assert "flowrun-success" in out.html


def test_notification_failure_names_node_and_hint(make_engine):
    engine = make_engine(RecordingInvoker(fail_on={"b"}, error=TimeoutError("gateway timed out")))
    with pytest.raises(NodeExecutionError) as ei:
        engine.run([{"id": "a"}, {"id": "b"}, {"id": "c"}], [{"source": "a", "target": "b"}, {"source": "b", "target": "c"}])
    out = render_run_notification(ei.value.result)
    first_line = out.text.splitlines()[0]
    assert first_line == "Workflow failed at node 'b': gateway timed out"
    assert "node_timeout_seconds" in out.text
    assert "flowrun-error" in out.html


def test_notification_incomplete_lists_unreached(make_engine):
    result = make_engine(RecordingInvoker()).run(
        [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        [{"source": "b", "target": "c"}, {"source": "c", "target": "b"}],
    )
    out = render_run_notification(result)
    assert out.text == "Workflow incomplete: 1/3 nodes executed; unreached: b, c"


def test_purity_render_states_does_not_mutate_input():
    states = {"a": {"status": "idle"}}
    before = copy.deepcopy(states)
    _ = render_states(states)
    assert states == before
