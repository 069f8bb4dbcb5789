# tests/core/engine/test_scheduler_unreached.py
"""
Testes de nós nunca despachados (ciclos e dependências presas).

Os testes asseguram que:
- com a política `report` (default), a run termina `incomplete` e
  lista os nós presos em `RunResult.unreached`
- com a política `raise`, a run levanta `CycleDetectedError` com o
  RunResult parcial
- nós fora do ciclo executam normalmente antes do encerramento
"""

import pytest

from flowrun.core.exceptions import CycleDetectedError
from flowrun.core.workflow.types import NodeStatus, RunStatus
from tests.fixtures.invokers import RecordingInvoker

NODES = [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}]
EDGES = [
    {"source": "b", "target": "c"},
    {"source": "c", "target": "b"},
    {"source": "c", "target": "d"},
]


def test_report_policy_returns_incomplete(make_engine):
    invoker = RecordingInvoker()
    engine = make_engine(invoker)

    result = engine.run(NODES, EDGES)

    assert invoker.order == ["a"]
    assert result.status == RunStatus.INCOMPLETE
    assert not result.succeeded
    assert result.unreached == ["b", "c", "d"]
    assert set(result.nodes) == {"a"}
    assert result.executed_count < len(NODES)
    assert result.events[-1]["message"] == "run_finished"
    assert result.events[-1]["unreached"] == ["b", "c", "d"]


def test_raise_policy_raises_cycle_detected(make_engine):
    invoker = RecordingInvoker()
    engine = make_engine(invoker, config={"engine": {"unreached_policy": "raise"}})

    with pytest.raises(CycleDetectedError) as ei:
        engine.run(NODES, EDGES, workflow_id="wf")

    exc = ei.value
    assert exc.stranded == ["b", "c", "d"]
    assert exc.result.status == RunStatus.ERROR
    assert exc.result.nodes["a"].status == NodeStatus.SUCCESS
    assert exc.result.error.details == {"nodes": ["b", "c", "d"]}
    assert not engine.is_executing("wf")


def test_raise_policy_does_not_affect_acyclic_runs(make_engine):
    engine = make_engine(RecordingInvoker(), config={"engine": {"unreached_policy": "raise"}})
    result = engine.run([{"id": "a"}, {"id": "b"}], [{"source": "a", "target": "b"}])
    assert result.status == RunStatus.SUCCESS
