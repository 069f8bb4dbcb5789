# src/flowrun/core/workflow/registry.py
"""
Registro de invokers por tipo de nó.

Este módulo define o `InvokerRegistry`, responsável por mapear o `type`
de cada nó para a implementação de `NodeInvoker` que o executa.

O registry substitui o despacho ad hoc por tipo: cada nó é resolvido
uma única vez, antes do início da run, contra um mapa explícito.

Decisões arquiteturais:
    - Registros duplicados são tratados como erro fatal de configuração
    - Um invoker `default` opcional atende tipos não registrados
    - A ordem de registro é preservada para inspeção

Invariantes:
    - Cada `type` possui no máximo um invoker
    - Apenas objetos que satisfazem `NodeInvoker` são aceitos

Limites explícitos:
    - Não executa nós
    - Não conhece o grafo nem o Engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from flowrun.core.exceptions import DuplicateInvokerError, UnknownNodeTypeError

from .invoker import FunctionInvoker, NodeInvoker
from .types import Node


@dataclass
class InvokerRegistry:
    """Mapa canônico `node.type → NodeInvoker`."""

    default: Optional[NodeInvoker] = None

    _invokers: Dict[str, NodeInvoker] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def register(self, node_type: str, invoker: NodeInvoker) -> None:
        if not isinstance(node_type, str):
            raise TypeError("node_type must be a string")
        if not isinstance(invoker, NodeInvoker):
            raise TypeError(f"Invoker for '{node_type}' must implement invoke(node, inputs)")
        if node_type in self._invokers:
            raise DuplicateInvokerError(
                f"Duplicate invoker for node type: {node_type}",
                details={"node_type": node_type},
            )
        self._invokers[node_type] = invoker
        self._order.append(node_type)

    def register_function(self, node_type: str, fn: Callable[..., Any]) -> None:
        self.register(node_type, FunctionInvoker(fn))

    def has(self, node_type: str) -> bool:
        return node_type in self._invokers or self.default is not None

    def resolve(self, node: Node) -> NodeInvoker:
        invoker = self._invokers.get(node.type)
        if invoker is not None:
            return invoker
        if self.default is not None:
            return self.default
        raise UnknownNodeTypeError(
            f"No invoker registered for node type '{node.type}' (node '{node.id}')",
            details={"node_id": node.id, "node_type": node.type},
            hint="Registre um invoker para o tipo ou configure um invoker default",
        )

    def types(self) -> List[str]:
        return list(self._order)
