# tests/core/engine/test_graph_builder.py
"""
Testes do Graph Builder.

Este módulo valida a conversão da lista plana de nós e arestas em
visão de adjacência (sucessores, indegree, arestas de entrada).

Os testes asseguram que:
- arestas para nós inexistentes abortam antes de qualquer execução
- ids de nó vazios ou duplicados são rejeitados
- o indegree conta predecessores distintos, não arestas
- a ordem de sucessores e raízes segue a ordem de declaração

Decisões arquiteturais:
    - Ciclos não são rejeitados pelo builder (o Scheduler os reporta)
    - A mesma entrada produz sempre a mesma visão

Limites explícitos:
    - Não valida execução de nós
    - Não valida políticas do engine
"""

import pytest

try:
    from flowrun.core.engine.graph import build_graph
    from flowrun.core.exceptions import GraphIntegrityError
    from flowrun.core.workflow.types import Edge, Node
except Exception as e:  # noqa: BLE001
    build_graph = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha explicitamente quando o Graph Builder não pode ser importado."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing graph builder. Implement:\n"
            "- src/flowrun/core/engine/graph.py (build_graph)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_successors_and_indegree():
    """
    Verifica sucessores e indegree de um grafo em diamante.

    Invariantes:
        - Todo nó aparece em `successors`, `indegree` e `incoming`
        - Raízes são exatamente os nós com indegree zero
    """
    _require_imports()
    graph = build_graph(
        [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}],
        [
            {"id": "e1", "source": "a", "target": "b"},
            {"id": "e2", "source": "a", "target": "c"},
            {"id": "e3", "source": "b", "target": "d"},
            {"id": "e4", "source": "c", "target": "d"},
        ],
    )
    assert graph.successors == {"a": ("b", "c"), "b": ("d",), "c": ("d",), "d": ()}
    assert graph.indegree == {"a": 0, "b": 1, "c": 1, "d": 2}
    assert [e.id for e in graph.incoming["d"]] == ["e3", "e4"]
    assert graph.roots() == ["a"]
    assert len(graph) == 4


def test_accepts_typed_nodes_and_edges():
    _require_imports()
    graph = build_graph([Node(id="a"), Node(id="b")], [Edge(id="e1", source="a", target="b")])
    assert graph.indegree["b"] == 1
    assert graph.nodes["a"] == Node(id="a")


def test_duplicate_edges_from_same_predecessor_count_once():
    """
    Duas arestas do mesmo predecessor exigem uma única conclusão.

    Ambas continuam registradas em `incoming` para o wiring de inputs.
    """
    _require_imports()
    graph = build_graph(
        [{"id": "a"}, {"id": "b"}],
        [
            {"id": "e1", "source": "a", "target": "b", "targetHandle": "x"},
            {"id": "e2", "source": "a", "target": "b", "targetHandle": "y"},
        ],
    )
    assert graph.indegree["b"] == 1
    assert graph.successors["a"] == ("b",)
    assert [e.input_key for e in graph.incoming["b"]] == ["x", "y"]


def test_edge_to_unknown_target_raises():
    _require_imports()
    with pytest.raises(GraphIntegrityError) as ei:
        build_graph([{"id": "a"}], [{"id": "e1", "source": "a", "target": "ghost"}])
    assert ei.value.details == {"edge_id": "e1", "end": "target", "node_id": "ghost"}


def test_edge_from_unknown_source_raises():
    _require_imports()
    with pytest.raises(GraphIntegrityError):
        build_graph([{"id": "a"}], [{"source": "ghost", "target": "a"}])


def test_duplicate_node_id_raises():
    _require_imports()
    with pytest.raises(GraphIntegrityError):
        build_graph([{"id": "a"}, {"id": "a"}], [])


@pytest.mark.parametrize("bad_id", ["", "   "])
def test_empty_node_id_raises(bad_id):
    _require_imports()
    with pytest.raises(GraphIntegrityError):
        build_graph([{"id": bad_id}], [])


def test_missing_fields_raise_graph_integrity_error():
    _require_imports()
    with pytest.raises(GraphIntegrityError):
        build_graph([{"type": "task"}], [])
    with pytest.raises(GraphIntegrityError):
        build_graph([{"id": "a"}], [{"source": "a"}])


@pytest.mark.parametrize(
    "nodes, edges",
    [
        ([{"id": "n1", "data": "oops"}], []),
        ([{"id": "n1", "config": 5}], []),
        ([{"id": "n1", "config": ["x"]}], []),
        (["n1"], []),
        ([{"id": "n1"}], [("n1", "n1")]),
    ],
)
def test_malformed_definitions_raise_graph_integrity_error(nodes, edges):
    _require_imports()
    with pytest.raises(GraphIntegrityError) as ei:
        build_graph(nodes, edges)
    assert "Malformed" in ei.value.message


def test_cycle_is_not_rejected_by_builder():
    _require_imports()
    graph = build_graph(
        [{"id": "a"}, {"id": "b"}],
        [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}],
    )
    assert graph.roots() == []


def test_descendants():
    _require_imports()
    graph = build_graph(
        [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "x"}],
        [{"source": "a", "target": "b"}, {"source": "b", "target": "c"}],
    )
    assert graph.descendants("a") == {"b", "c"}
    assert graph.descendants("c") == set()
    assert graph.descendants("x") == set()
