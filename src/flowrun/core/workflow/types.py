# src/flowrun/core/workflow/types.py
"""
Tipos canônicos do workflow do Flowrun.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Graph Builder, Scheduler, State Tracker e os
invokers externos de cada tipo de nó.

Os tipos aqui definidos representam:
    - a definição imutável de nós e arestas de uma run
    - a máquina de estados por nó (idle → running → success | error)
    - o resultado consolidado de uma run (RunResult)

Componentes principais:
    - Node, Edge        → definição do grafo (imutável durante a run)
    - NodeStatus        → enum de estados de execução de um nó
    - ExecutionState    → estado imutável de um nó em um instante
    - NodeOutcome       → entrada terminal de um nó no RunResult
    - RunStatus         → desfecho agregado da run
    - RunResult         → relatório consolidado por nó

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo
    - `config` e `result` são opacos para o motor

Invariantes:
    - Enums possuem valores textuais canônicos
    - Estruturas de definição e de estado são imutáveis (frozen)

Este módulo existe para garantir consistência
e clareza semântica entre os componentes do motor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from flowrun.core.errors import ErrorInfo


DEFAULT_INPUT_HANDLE = "input"


class NodeStatus(str, Enum):
    """
    Estados possíveis da execução de um nó dentro de uma run.

    Estados definidos:
        - IDLE: criado no início da run, ainda não despachado
        - RUNNING: despachado, aguardando o Node Invoker
        - SUCCESS: invoker retornou um resultado (terminal)
        - ERROR: invoker falhou (terminal)

    Invariantes:
        - Um nó em estado terminal nunca transiciona na mesma run
        - O valor textual do enum é estável e canônico
    """
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (NodeStatus.SUCCESS, NodeStatus.ERROR)


class RunStatus(str, Enum):
    """Desfecho agregado de uma run."""
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class Node:
    """
    Unidade de trabalho do workflow.

    Campos:
        - id: identificador único dentro da run
        - type: seleciona o invoker externo responsável pelo nó
        - config: documento estruturado opaco para o motor
    """
    id: str
    type: str = ""
    config: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Node":
        """Constrói um Node a partir do formato do store de definições.

        Aceita `config` no topo ou aninhado em `data.config`.

        Raises:
            KeyError: Se `id` estiver ausente.
            TypeError: Se a definição, `data` ou `config` não forem mapeamentos.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"node definition must be a mapping, got {type(data).__name__}")
        config = data.get("config")
        if config is None:
            nested = data.get("data") or {}
            if not isinstance(nested, Mapping):
                raise TypeError(f"node 'data' must be a mapping, got {type(nested).__name__}")
            config = nested.get("config")
        if config is not None and not isinstance(config, Mapping):
            raise TypeError(f"node 'config' must be a mapping, got {type(config).__name__}")
        return cls(
            id=data["id"],
            type=data.get("type") or "",
            config=dict(config or {}),
        )


@dataclass(frozen=True)
class Edge:
    """
    Dependência de dados entre dois nós.

    `target` só executa depois de `source` produzir um resultado, que é
    entregue a `target` sob a chave `target_handle` (default "input").
    """
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None

    @property
    def input_key(self) -> str:
        return self.target_handle or DEFAULT_INPUT_HANDLE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Edge":
        """Constrói uma Edge aceitando chaves camelCase (`sourceHandle`) ou snake_case."""
        if not isinstance(data, Mapping):
            raise TypeError(f"edge definition must be a mapping, got {type(data).__name__}")
        source = data["source"]
        target = data["target"]
        return cls(
            id=data.get("id") or f"{source}->{target}",
            source=source,
            target=target,
            source_handle=data.get("sourceHandle", data.get("source_handle")),
            target_handle=data.get("targetHandle", data.get("target_handle")),
        )


@dataclass(frozen=True)
class ExecutionState:
    """
    Estado de execução de um nó em um instante da run.

    A instância é imutável: o State Tracker substitui a entrada a cada
    transição, o que torna snapshots seguros para leitura externa.
    """
    status: NodeStatus = NodeStatus.IDLE
    result: Any = None
    error: Optional[ErrorInfo] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.start_time is None or self.end_time is None:
            return None
        return max(0, int((self.end_time - self.start_time).total_seconds() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "result": self.result,
            "error": self.error.to_dict() if self.error is not None else None,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class NodeOutcome:
    """Entrada terminal de um nó no RunResult: `{status, result | error}`."""
    node_id: str
    status: NodeStatus
    result: Any = None
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"node_id": self.node_id, "status": self.status.value}
        if self.status == NodeStatus.ERROR:
            data["error"] = self.error.to_dict() if self.error is not None else None
        else:
            data["result"] = self.result
        return data


@dataclass(frozen=True)
class RunResult:
    """
    Resultado agregado de uma run (RunResult v1).

    Campos:
        - nodes: apenas nós que atingiram estado terminal
        - states: snapshot de todos os nós, incluindo os ainda `idle`
        - unreached: nós nunca despachados
        - error: presente quando a run foi abortada
        - events: event log estruturado da run
    """
    run_id: str
    workflow_id: str
    status: RunStatus
    nodes: Dict[str, NodeOutcome] = field(default_factory=dict)
    states: Dict[str, ExecutionState] = field(default_factory=dict)
    unreached: List[str] = field(default_factory=list)
    error: Optional[ErrorInfo] = None
    config_hash: Optional[str] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS

    @property
    def executed_count(self) -> int:
        return len(self.nodes)

    def output_of(self, node_id: str) -> Any:
        outcome = self.nodes[node_id]
        if outcome.status != NodeStatus.SUCCESS:
            raise KeyError(node_id)
        return outcome.result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "workflow_id": self.workflow_id,
            "status": self.status.value,
            "nodes": {k: v.to_dict() for k, v in self.nodes.items()},
            "states": {k: v.to_dict() for k, v in self.states.items()},
            "unreached": list(self.unreached),
            "error": self.error.to_dict() if self.error is not None else None,
            "config_hash": self.config_hash,
            "events": [dict(e) for e in self.events],
        }
