# src/flowrun/core/engine/tracker.py
"""
State Tracker da run.

Este módulo define o `StateTracker`, que mantém a máquina de estados
de cada nó durante uma run e expõe uma visão somente leitura para
camadas de UI e telemetria.

Máquina de estados por nó:
    idle → running → success | error

Decisões arquiteturais:
    - Apenas o Scheduler escreve no tracker
    - Entradas são `ExecutionState` imutáveis, substituídas a cada transição
    - Listeners são notificados após cada transição; falhas de listener
      são registradas e nunca alteram a run
    - Timestamps são fornecidos pelo chamador (relógio injetável)

Invariantes:
    - Um nó em estado terminal nunca transiciona na mesma run
    - Um nó só vai a `running` a partir de `idle`
    - `snapshot()` nunca expõe referências mutáveis internas

Limites explícitos:
    - Não decide ordem de execução
    - Não persiste estados entre runs
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from flowrun.core.errors import ErrorInfo
from flowrun.core.exceptions import InvalidStateTransitionError
from flowrun.core.workflow.types import ExecutionState, NodeStatus


StateListener = Callable[[str, ExecutionState], Any]


class StateTracker:
    """Estados de execução por nó, com notificação de transições."""

    def __init__(self, node_ids: Iterable[str] = ()):
        self._states: Dict[str, ExecutionState] = {}
        self._listeners: List[StateListener] = []
        self.listener_errors: List[Tuple[str, BaseException]] = []
        self.begin(node_ids)

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def begin(self, node_ids: Iterable[str]) -> None:
        """Inicia uma run: todo nó começa em `idle`."""
        self._states = {nid: ExecutionState() for nid in node_ids}
        self.listener_errors = []

    def reset(self) -> None:
        self._states = {}
        self.listener_errors = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registra um listener `(node_id, state)`; retorna a função de remoção."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -----------------------------
    # Transições
    # -----------------------------
    def mark_running(self, node_id: str, *, ts: datetime) -> ExecutionState:
        current = self._require(node_id)
        if current.status != NodeStatus.IDLE:
            raise InvalidStateTransitionError(
                f"Node '{node_id}' cannot start from status '{current.status.value}'",
                details={"node_id": node_id, "status": current.status.value},
            )
        return self._set(node_id, ExecutionState(status=NodeStatus.RUNNING, start_time=ts))

    def mark_success(self, node_id: str, *, result: Any, ts: datetime) -> ExecutionState:
        current = self._require_running(node_id)
        return self._set(node_id, replace(current, status=NodeStatus.SUCCESS, result=result, end_time=ts))

    def mark_error(self, node_id: str, *, error: ErrorInfo, ts: datetime) -> ExecutionState:
        current = self._require_running(node_id)
        return self._set(node_id, replace(current, status=NodeStatus.ERROR, error=error, end_time=ts))

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, node_id: str) -> ExecutionState:
        return self._require(node_id)

    def snapshot(self) -> Dict[str, ExecutionState]:
        return dict(self._states)

    def with_status(self, status: NodeStatus) -> List[str]:
        return [nid for nid, s in self._states.items() if s.status == status]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    # -----------------------------
    # Internos
    # -----------------------------
    def _require(self, node_id: str) -> ExecutionState:
        if node_id not in self._states:
            raise KeyError(node_id)
        return self._states[node_id]

    def _require_running(self, node_id: str) -> ExecutionState:
        current = self._require(node_id)
        if current.status != NodeStatus.RUNNING:
            raise InvalidStateTransitionError(
                f"Node '{node_id}' cannot finish from status '{current.status.value}'",
                details={"node_id": node_id, "status": current.status.value},
            )
        return current

    def _set(self, node_id: str, state: ExecutionState) -> ExecutionState:
        self._states[node_id] = state
        self._notify(node_id, state)
        return state

    def _notify(self, node_id: str, state: ExecutionState) -> None:
        for listener in list(self._listeners):
            try:
                listener(node_id, state)
            except Exception as e:
                # Listener de UI/telemetria nunca altera a run.
                self.listener_errors.append((node_id, e))


def summarize(states: Dict[str, ExecutionState]) -> Dict[str, int]:
    """Contagem de nós por status (útil para notificações agregadas)."""
    counts = {s.value: 0 for s in NodeStatus}
    for state in states.values():
        counts[state.status.value] += 1
    return counts


def first_error(states: Dict[str, ExecutionState]) -> Optional[Tuple[str, ExecutionState]]:
    for nid, state in states.items():
        if state.status == NodeStatus.ERROR:
            return nid, state
    return None
