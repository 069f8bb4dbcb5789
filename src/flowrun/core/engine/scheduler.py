# src/flowrun/core/engine/scheduler.py
"""
Scheduler do Flowrun: execução topológica serial de um workflow.

Algoritmo (Kahn com fila FIFO):
    1. A fila de prontos é semeada com os nós sem dependências, na ordem
       de declaração.
    2. Cada nó retirado da fila recebe como inputs os resultados dos seus
       predecessores (por handle), vai a `running` e é entregue ao invoker.
    3. Em sucesso, o resultado é registrado e cada sucessor tem seu
       indegree decrementado; ao chegar a zero, entra no fim da fila.
    4. Em falha, o nó vai a `error` e a run é abortada imediatamente com
       `NodeExecutionError` carregando o RunResult parcial.

Ajustes:
- Invokers síncronos são chamados inline; awaitables são aguardados,
  opcionalmente com timeout e disputados contra o CancellationToken.
- Nós que nunca ficam prontos são reportados em `RunResult.unreached`
  ou, com `engine.unreached_policy: raise`, via `CycleDetectedError`.
- O Run Guard é adquirido antes de qualquer validação e liberado ao
  final da run, com sucesso ou não.

Invariantes:
    - Cada nó é despachado no máximo uma vez por run
    - Um nó só é despachado após todos os predecessores terminarem em `success`
    - Após um `error`, nenhum outro nó é despachado na run
    - No máximo uma invocação em andamento por run
"""

from __future__ import annotations

import asyncio
import inspect
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

from flowrun.core.config import compute_config_hash, resolve_engine_config
from flowrun.core.errors import ErrorInfo, run_cancelled
from flowrun.core.exceptions import (
    CycleDetectedError,
    NodeExecutionError,
    RunCancelledError,
)
from flowrun.core.workflow.context import RunContext
from flowrun.core.workflow.invoker import NodeInvoker
from flowrun.core.workflow.registry import InvokerRegistry
from flowrun.core.workflow.types import (
    Node,
    NodeOutcome,
    NodeStatus,
    RunResult,
    RunStatus,
)

from .cancellation import CancellationToken
from .graph import EdgeLike, GraphView, NodeLike, build_graph
from .guard import RunGuard
from .tracker import StateListener, StateTracker


DEFAULT_WORKFLOW_ID = "default"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _InvocationCancelled(Exception):
    """Sinal interno: o token venceu a disputa contra a invocação."""


class WorkflowEngine:
    """Engine canônico do Flowrun (graph builder + scheduler serial)."""

    def __init__(
        self,
        *,
        registry: InvokerRegistry,
        config: Optional[Mapping[str, Any]] = None,
        guard: Optional[RunGuard] = None,
        clock: Optional[Clock] = None,
    ):
        self.registry = registry
        self.config: Dict[str, Any] = resolve_engine_config(config)
        self.config_hash = compute_config_hash(self.config)
        self.guard = guard if guard is not None else RunGuard()
        self.clock: Clock = clock or _utcnow
        self._listeners: List[StateListener] = []

    @property
    def unreached_policy(self) -> str:
        return self.config["engine"]["unreached_policy"]

    @property
    def node_timeout(self) -> Optional[float]:
        return self.config["engine"]["node_timeout_seconds"]

    def subscribe(self, listener: StateListener) -> None:
        """Listener `(node_id, state)` ligado ao tracker de cada run."""
        self._listeners.append(listener)

    def is_executing(self, workflow_id: str = DEFAULT_WORKFLOW_ID) -> bool:
        return self.guard.is_active(workflow_id)

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------
    async def execute(
        self,
        nodes: Iterable[NodeLike],
        edges: Iterable[EdgeLike] = (),
        *,
        workflow_id: str = DEFAULT_WORKFLOW_ID,
        run_id: Optional[str] = None,
        tracker: Optional[StateTracker] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunResult:
        """
        Executa uma run completa do workflow.

        Returns:
            RunResult: status `success`, ou `incomplete` quando há nós
            nunca despachados e a política é `report`.

        Raises:
            AlreadyExecutingError: Se `workflow_id` já possui run ativa.
            GraphIntegrityError: Se a definição do grafo for inválida.
            UnknownNodeTypeError: Se algum nó não tiver invoker.
            NodeExecutionError: Se um nó falhar (carrega `result` parcial).
            CycleDetectedError: Com política `raise` e nós presos.
            RunCancelledError: Se o token for cancelado durante a run.
        """
        self.guard.acquire(workflow_id)
        try:
            graph = build_graph(nodes, edges)
            invokers = self._resolve_invokers(graph)

            tracker = tracker if tracker is not None else StateTracker()
            tracker.begin(graph.nodes)
            unsubscribers = [tracker.subscribe(listener) for listener in self._listeners]

            ctx = RunContext(
                run_id=run_id or uuid4().hex,
                workflow_id=workflow_id,
                created_at=self.clock(),
                config=self.config,
                graph=graph,
                tracker=tracker,
            )
            try:
                return await self._drain(ctx, invokers, cancel_token)
            finally:
                for unsubscribe in unsubscribers:
                    unsubscribe()
        finally:
            self.guard.release(workflow_id)

    async def execute_definition(self, definition: Mapping[str, Any], **kwargs: Any) -> RunResult:
        """Executa a partir do formato `{nodes: [...], edges: [...]}` do store."""
        return await self.execute(definition.get("nodes") or [], definition.get("edges") or [], **kwargs)

    def run(self, nodes: Iterable[NodeLike], edges: Iterable[EdgeLike] = (), **kwargs: Any) -> RunResult:
        """Atalho síncrono para `execute` (cria e fecha o próprio event loop)."""
        return asyncio.run(self.execute(nodes, edges, **kwargs))

    # ------------------------------------------------------------------
    # Loop do scheduler
    # ------------------------------------------------------------------
    def _resolve_invokers(self, graph: GraphView) -> Dict[str, NodeInvoker]:
        return {nid: self.registry.resolve(node) for nid, node in graph.nodes.items()}

    async def _drain(
        self,
        ctx: RunContext,
        invokers: Dict[str, NodeInvoker],
        token: Optional[CancellationToken],
    ) -> RunResult:
        graph = ctx.graph
        indegree = dict(graph.indegree)
        ready = deque(graph.roots())

        ctx.log(node_id=None, level="INFO", message="run_started", nodes=len(graph), edges=len(graph.edges))

        while ready:
            if token is not None and token.cancelled:
                raise self._cancelled(ctx, token, node_id=None)

            node_id = ready.popleft()
            node = graph.nodes.get(node_id)
            if node is None:
                continue

            value = await self._dispatch(ctx, node, invokers[node_id], ctx.inputs_for(node_id), token)
            ctx.set_result(node_id, value)

            for child in graph.successors[node_id]:
                indegree[child] -= 1
                if indegree[child] == 0:
                    ready.append(child)

        unreached = ctx.tracker.with_status(NodeStatus.IDLE)
        if unreached and self.unreached_policy == "raise":
            exc = CycleDetectedError(unreached)
            error = exc.to_error_info()
            ctx.log(node_id=None, level="ERROR", message="run_aborted", error=error.to_dict())
            exc.result = self._build_result(ctx, RunStatus.ERROR, error=error)
            raise exc

        status = RunStatus.INCOMPLETE if unreached else RunStatus.SUCCESS
        ctx.log(node_id=None, level="INFO", message="run_finished", status=status.value, unreached=unreached)
        return self._build_result(ctx, status)

    async def _dispatch(
        self,
        ctx: RunContext,
        node: Node,
        invoker: NodeInvoker,
        inputs: Dict[str, Any],
        token: Optional[CancellationToken],
    ) -> Any:
        ctx.tracker.mark_running(node.id, ts=self.clock())
        ctx.log(node_id=node.id, level="INFO", message="node_started", node_type=node.type, inputs=sorted(inputs))

        try:
            value = invoker.invoke(node, inputs)
            if inspect.isawaitable(value):
                value = await self._await_invocation(value, token)

        except _InvocationCancelled:
            reason = token.reason if token is not None else None
            error = run_cancelled(reason=reason, node_id=node.id)
            ctx.tracker.mark_error(node.id, error=error, ts=self.clock())
            ctx.log(node_id=node.id, level="WARNING", message="node_failed", error=error.to_dict())
            raise self._cancelled(ctx, token, node_id=node.id)

        except asyncio.CancelledError:
            error = run_cancelled(reason="run task cancelled", node_id=node.id)
            ctx.tracker.mark_error(node.id, error=error, ts=self.clock())
            ctx.log(node_id=node.id, level="WARNING", message="node_failed", error=error.to_dict())
            raise

        except Exception as e:
            if isinstance(e, NodeExecutionError) and e.cause is None:
                # Falha declarada pelo próprio invoker: preserva o texto sem prefixá-lo de novo.
                cause = e
                failure = NodeExecutionError(node.id, None, node_type=node.type, message=e.text)
            else:
                cause = e.cause if isinstance(e, NodeExecutionError) and e.cause is not None else e
                failure = NodeExecutionError(node.id, cause, node_type=node.type)
            error = failure.to_error_info()
            ctx.tracker.mark_error(node.id, error=error, ts=self.clock())
            ctx.log(node_id=node.id, level="ERROR", message="node_failed", error=error.to_dict())
            ctx.log(node_id=node.id, level="ERROR", message="run_aborted", failed_node=node.id)
            failure.result = self._build_result(ctx, RunStatus.ERROR, error=error)
            raise failure from cause

        state = ctx.tracker.mark_success(node.id, result=value, ts=self.clock())
        ctx.log(node_id=node.id, level="INFO", message="node_succeeded", duration_ms=state.duration_ms)
        return value

    async def _await_invocation(self, awaitable: Any, token: Optional[CancellationToken]) -> Any:
        task = asyncio.ensure_future(awaitable)
        timeout = self.node_timeout
        if token is None and timeout is None:
            return await task

        waiters = {task}
        cancel_waiter = asyncio.ensure_future(token.wait()) if token is not None else None
        if cancel_waiter is not None:
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        if cancel_waiter is not None and cancel_waiter in done:
            waiter_error = cancel_waiter.exception()
            if waiter_error is not None:
                raise waiter_error
            raise _InvocationCancelled()
        raise TimeoutError(f"Node invocation timed out after {timeout}s")

    # ------------------------------------------------------------------
    # Resultado
    # ------------------------------------------------------------------
    def _cancelled(
        self,
        ctx: RunContext,
        token: Optional[CancellationToken],
        *,
        node_id: Optional[str],
    ) -> RunCancelledError:
        reason = token.reason if token is not None else None
        exc = RunCancelledError(reason, node_id=node_id)
        error = exc.to_error_info()
        ctx.log(node_id=node_id, level="WARNING", message="run_cancelled", reason=reason)
        exc.result = self._build_result(ctx, RunStatus.CANCELLED, error=error)
        return exc

    def _build_result(
        self,
        ctx: RunContext,
        status: RunStatus,
        *,
        error: Optional[ErrorInfo] = None,
    ) -> RunResult:
        states = ctx.tracker.snapshot()
        outcomes = {
            nid: NodeOutcome(node_id=nid, status=s.status, result=s.result, error=s.error)
            for nid, s in states.items()
            if s.status.is_terminal
        }
        return RunResult(
            run_id=ctx.run_id,
            workflow_id=ctx.workflow_id,
            status=status,
            nodes=outcomes,
            states=states,
            unreached=[nid for nid, s in states.items() if s.status == NodeStatus.IDLE],
            error=error,
            config_hash=self.config_hash,
            events=[dict(e) for e in ctx.events],
        )
