# src/flowrun/__init__.py
"""
Flowrun: motor de execução de workflows em grafo de dependências de dados.

Um workflow é uma lista de nós tipados e de arestas `source → target`.
O Flowrun executa os nós um de cada vez, em ordem topológica, entregando
a cada nó os resultados dos predecessores e interrompendo a run na
primeira falha.

Arquitetura em alto nível:
    - core.config    → carregamento, merge, validação e hashing de configuração
    - core.workflow  → tipos, contrato de invoker, registry e RunContext
    - core.engine    → graph builder, scheduler, state tracker e run guard
    - status_ui      → renderização de estados e notificação agregada

Limites explícitos:
    - Não implementa a lógica de nenhum tipo de nó (invokers são externos)
    - Não executa nós em paralelo
    - Não persiste definições nem resultados
"""

from .core.engine.cancellation import CancellationToken
from .core.engine.graph import build_graph, plan_execution
from .core.engine.guard import RunGuard
from .core.engine.scheduler import WorkflowEngine
from .core.engine.tracker import StateTracker
from .core.exceptions import (
    AlreadyExecutingError,
    CycleDetectedError,
    FlowrunException,
    GraphIntegrityError,
    NodeExecutionError,
    RunCancelledError,
    UnknownNodeTypeError,
)
from .core.workflow.invoker import FunctionInvoker, NodeInvoker
from .core.workflow.registry import InvokerRegistry
from .core.workflow.types import Edge, ExecutionState, Node, NodeStatus, RunResult, RunStatus
from .status_ui import RenderResult, render_run_notification, render_states

__all__ = [
    "CancellationToken",
    "build_graph",
    "plan_execution",
    "RunGuard",
    "WorkflowEngine",
    "StateTracker",
    "AlreadyExecutingError",
    "CycleDetectedError",
    "FlowrunException",
    "GraphIntegrityError",
    "NodeExecutionError",
    "RunCancelledError",
    "UnknownNodeTypeError",
    "FunctionInvoker",
    "NodeInvoker",
    "InvokerRegistry",
    "Edge",
    "ExecutionState",
    "Node",
    "NodeStatus",
    "RunResult",
    "RunStatus",
    "RenderResult",
    "render_run_notification",
    "render_states",
]
