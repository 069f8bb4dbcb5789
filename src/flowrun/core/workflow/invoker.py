# src/flowrun/core/workflow/invoker.py
"""
Contrato canônico de Node Invoker do Flowrun.

Este módulo define a fronteira de abstração entre o motor e as
implementações externas de cada tipo de nó (envio de mensagens,
transformação de planilhas, chamadas HTTP, ...).

Contrato:
    invoke(node, inputs) -> resultado

    - pode retornar um valor ou um awaitable (invokers sync e async)
    - pode falhar com qualquer exceção; o Engine a encapsula em
      NodeExecutionError
    - retry/backoff, se desejado, vive dentro do invoker específico

Princípios fundamentais:
    - Invokers não conhecem o Engine nem o grafo
    - O Engine não interpreta o resultado além de repassá-lo aos sucessores
    - Conformidade é garantida por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from .types import Node


@runtime_checkable
class NodeInvoker(Protocol):
    """
    Capacidade única que toda implementação de tipo de nó deve expor.

    A validação do protocolo ocorre em runtime (`@runtime_checkable`),
    permitindo verificação por duck typing durante registro e testes.

    Invariantes:
        - `invoke` é chamado no máximo uma vez por nó por run
        - `inputs` mapeia handle → resultado do predecessor
    """

    def invoke(self, node: Node, inputs: Mapping[str, Any]) -> Any:
        """Executa o nó com os inputs já resolvidos dos predecessores."""
        ...


class FunctionInvoker:
    """Adapta um callable `fn(node, inputs)` (sync ou async) ao protocolo."""

    def __init__(self, fn: Callable[[Node, Mapping[str, Any]], Any]):
        if not callable(fn):
            raise TypeError("FunctionInvoker requires a callable")
        self.fn = fn

    def invoke(self, node: Node, inputs: Mapping[str, Any]) -> Any:
        return self.fn(node, inputs)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"FunctionInvoker({name})"

