# src/flowrun/core/engine/graph.py
"""
Graph Builder do workflow.

Este módulo converte a lista plana de nós e arestas fornecida pelo
store de definições em uma visão de adjacência pronta para o Scheduler:
sucessores por nó, contagem de dependências pendentes (indegree) e
arestas de entrada por nó para o wiring de inputs.

O builder opera exclusivamente em nível estrutural, analisando:
    - identificadores de nós (não vazios e únicos)
    - integridade referencial das arestas
    - dependências distintas entre nós

Decisões arquiteturais:
    - Arestas para nós inexistentes abortam a run antes de qualquer execução
    - O indegree conta predecessores distintos, não arestas: duas arestas
      do mesmo predecessor exigem uma única conclusão
    - Ciclos não são rejeitados aqui; nós presos nunca ficam prontos e
      são reportados pelo Scheduler ao final da run
    - A ordem de sucessores e raízes segue a ordem de declaração

Invariantes:
    - Todo nó aparece em `successors`, `indegree` e `incoming`
    - `indegree[n] == número de predecessores distintos de n`
    - A mesma entrada produz sempre a mesma visão

Limites explícitos:
    - Não executa nós
    - Não interage com RunContext
    - Não decide políticas de execução

Este módulo existe para garantir integridade estrutural
e previsibilidade antes do despacho do primeiro nó.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple, Union

from flowrun.core.exceptions import CycleDetectedError, GraphIntegrityError
from flowrun.core.workflow.types import Edge, Node


NodeLike = Union[Node, Mapping[str, Any]]
EdgeLike = Union[Edge, Mapping[str, Any]]


@dataclass(frozen=True)
class GraphView:
    """
    Visão de adjacência imutável de um workflow.

    Campos:
        - nodes: nós por id, na ordem de declaração
        - edges: arestas na ordem de declaração
        - successors: sucessores distintos por nó
        - indegree: número de predecessores distintos por nó
        - incoming: arestas cujo `target` é o nó, na ordem de declaração
    """

    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: Tuple[Edge, ...] = ()
    successors: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    indegree: Dict[str, int] = field(default_factory=dict)
    incoming: Dict[str, Tuple[Edge, ...]] = field(default_factory=dict)

    def roots(self) -> List[str]:
        return [nid for nid in self.nodes if self.indegree[nid] == 0]

    def descendants(self, node_id: str) -> Set[str]:
        """Todos os nós alcançáveis a partir de `node_id` (exclusive)."""
        seen: Set[str] = set()
        frontier = deque(self.successors.get(node_id, ()))
        while frontier:
            nid = frontier.popleft()
            if nid in seen:
                continue
            seen.add(nid)
            frontier.extend(self.successors.get(nid, ()))
        seen.discard(node_id)
        return seen

    def __len__(self) -> int:
        return len(self.nodes)


def _raw(item: Any) -> Any:
    return dict(item) if isinstance(item, Mapping) else repr(item)


def _as_node(item: NodeLike) -> Node:
    if isinstance(item, Node):
        return item
    try:
        return Node.from_dict(item)
    except KeyError as e:
        raise GraphIntegrityError(f"Node definition missing field {e}", details={"node": _raw(item)})
    except TypeError as e:
        raise GraphIntegrityError(f"Malformed node definition: {e}", details={"node": _raw(item)})


def _as_edge(item: EdgeLike) -> Edge:
    if isinstance(item, Edge):
        return item
    try:
        return Edge.from_dict(item)
    except KeyError as e:
        raise GraphIntegrityError(f"Edge definition missing field {e}", details={"edge": _raw(item)})
    except TypeError as e:
        raise GraphIntegrityError(f"Malformed edge definition: {e}", details={"edge": _raw(item)})


def build_graph(nodes: Iterable[NodeLike], edges: Iterable[EdgeLike]) -> GraphView:
    """
    Valida a definição do workflow e produz sua visão de adjacência.

    Args:
        nodes (Iterable[Node | Mapping]): Nós do workflow.
        edges (Iterable[Edge | Mapping]): Arestas de dependência de dados.

    Returns:
        GraphView: Sucessores, indegree e arestas de entrada por nó.

    Raises:
        GraphIntegrityError: Se algum nó tiver id vazio ou duplicado, ou
            se alguma aresta referenciar um nó inexistente.
    """
    by_id: Dict[str, Node] = {}
    for raw in nodes:
        node = _as_node(raw)
        if not isinstance(node.id, str) or not node.id.strip():
            raise GraphIntegrityError("node.id must be a non-empty string", details={"node_id": node.id})
        if node.id in by_id:
            raise GraphIntegrityError(f"Duplicate node id: {node.id}", details={"node_id": node.id})
        by_id[node.id] = node

    edge_list: List[Edge] = []
    for raw in edges:
        edge = _as_edge(raw)
        for end, nid in (("source", edge.source), ("target", edge.target)):
            if nid not in by_id:
                raise GraphIntegrityError(
                    f"Edge '{edge.id}' references unknown {end} node '{nid}'",
                    details={"edge_id": edge.id, "end": end, "node_id": nid},
                    hint="Remova a aresta ou inclua o nó referenciado na definição do workflow",
                )
        edge_list.append(edge)

    successors: Dict[str, List[str]] = {nid: [] for nid in by_id}
    predecessors: Dict[str, Set[str]] = {nid: set() for nid in by_id}
    incoming: Dict[str, List[Edge]] = {nid: [] for nid in by_id}

    for edge in edge_list:
        incoming[edge.target].append(edge)
        if edge.source in predecessors[edge.target]:
            continue
        predecessors[edge.target].add(edge.source)
        successors[edge.source].append(edge.target)

    return GraphView(
        nodes=by_id,
        edges=tuple(edge_list),
        successors={nid: tuple(s) for nid, s in successors.items()},
        indegree={nid: len(p) for nid, p in predecessors.items()},
        incoming={nid: tuple(e) for nid, e in incoming.items()},
    )


def plan_execution(graph: GraphView) -> List[str]:
    """
    Produz a ordem em que o Scheduler despacharia os nós se todos tivessem sucesso.

    Usa a mesma política FIFO do Scheduler (Kahn): raízes na ordem de
    declaração, e nós que ficam prontos no mesmo passo na ordem em que
    ficaram prontos. Nenhum nó é executado.

    Raises:
        CycleDetectedError: Se algum nó nunca ficar pronto.
    """
    indegree = dict(graph.indegree)
    ready = deque(graph.roots())
    order: List[str] = []

    while ready:
        nid = ready.popleft()
        order.append(nid)
        for child in graph.successors[nid]:
            indegree[child] -= 1
            if indegree[child] == 0:
                ready.append(child)

    if len(order) != len(graph.nodes):
        placed = set(order)
        raise CycleDetectedError([nid for nid in graph.nodes if nid not in placed])

    return order
