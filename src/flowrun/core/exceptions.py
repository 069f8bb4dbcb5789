# src/flowrun/core/exceptions.py
"""
Flowrun: Canonical Exceptions (v1)

Este módulo define as exceções tipadas do Flowrun.

Objetivo:
- Permitir que Engine, Graph Builder e invokers levantem falhas semânticas
- Facilitar o mapeamento determinístico para `ErrorInfo`
- Evitar ValueError/RuntimeError genéricos nos guardrails do motor

Regras:
- Exceções carregam apenas dados estruturados em `details`
- Exceções de abort de run carregam o `RunResult` parcial em `result`
- A mensagem é curta e humana; stack traces nunca vão para payloads
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .errors import (
    ALREADY_EXECUTING,
    ENGINE_CONFIGURATION_ERROR,
    GRAPH_INTEGRITY_ERROR,
    ErrorCategory,
    ErrorInfo,
    cycle_detected,
    node_execution_error,
    run_cancelled,
)

if TYPE_CHECKING:  # pragma: no cover
    from .workflow.types import RunResult


class FlowrunException(Exception):
    """Base class para exceções internas do Flowrun.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    error_type: str = ENGINE_CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.hint = hint

    def __str__(self) -> str:
        return self.message

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.error_type,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


# ---------------------------------------------------------------------------
# Grafo
# ---------------------------------------------------------------------------

class GraphIntegrityError(FlowrunException):
    """Aresta referencia nó inexistente, ou ids de nó inválidos/duplicados."""

    error_type = GRAPH_INTEGRITY_ERROR


class CycleDetectedError(FlowrunException):
    """Nós nunca ficaram prontos: ciclo (ou dependência presa a um ciclo)."""

    def __init__(self, stranded: List[str], *, result: Optional["RunResult"] = None):
        super().__init__(
            f"Cycle detected: nodes never became ready: {', '.join(stranded)}",
            details={"nodes": list(stranded)},
            hint="Remova o ciclo entre os nós listados ou ajuste as arestas do workflow",
        )
        self.stranded = list(stranded)
        self.result = result

    def to_error_info(self) -> ErrorInfo:
        return cycle_detected(stranded=self.stranded)


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

class AlreadyExecutingError(FlowrunException):
    """Nova run pedida enquanto outra da mesma instância ainda está ativa."""

    error_type = ALREADY_EXECUTING

    def __init__(self, workflow_id: str):
        super().__init__(
            f"Workflow '{workflow_id}' is already executing",
            details={"workflow_id": workflow_id},
            hint="Aguarde a run ativa terminar antes de reexecutar",
        )
        self.workflow_id = workflow_id


class NodeExecutionError(FlowrunException):
    """
    Falha de um Node Invoker, encapsulando a causa original.

    Invokers podem levantar esta exceção diretamente (com `node_id` e
    `cause`); o Engine a relevanta anexando o `RunResult` parcial.
    """

    def __init__(
        self,
        node_id: str,
        cause: Optional[BaseException] = None,
        *,
        node_type: str = "",
        result: Optional["RunResult"] = None,
        message: Optional[str] = None,
    ):
        text = message or (str(cause) if cause is not None and str(cause) else None)
        super().__init__(
            f"Node '{node_id}' failed: {text}" if text else f"Node '{node_id}' failed",
            details={"node_id": node_id, "node_type": node_type},
        )
        self.node_id = node_id
        self.node_type = node_type
        self.cause = cause
        self.text = text
        self.result = result

    def to_error_info(self) -> ErrorInfo:
        return node_execution_error(
            node_id=self.node_id,
            node_type=self.node_type,
            cause=self.cause if self.cause is not None else self,
        )


class RunCancelledError(FlowrunException):
    """A run foi interrompida por um `CancellationToken`."""

    def __init__(
        self,
        reason: Optional[str] = None,
        *,
        node_id: Optional[str] = None,
        result: Optional["RunResult"] = None,
    ):
        super().__init__(reason or "Run cancelled", details={"node_id": node_id})
        self.reason = reason
        self.node_id = node_id
        self.result = result

    def to_error_info(self) -> ErrorInfo:
        return run_cancelled(reason=self.reason, node_id=self.node_id)


class InvalidStateTransitionError(FlowrunException):
    """Transição de estado de nó fora da máquina idle → running → terminal."""


# ---------------------------------------------------------------------------
# Registry de invokers
# ---------------------------------------------------------------------------

class UnknownNodeTypeError(FlowrunException):
    """Nenhum invoker registrado para o `type` do nó (e sem default)."""


class DuplicateInvokerError(FlowrunException):
    """Dois invokers registrados para o mesmo `type` de nó."""
