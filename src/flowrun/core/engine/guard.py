# src/flowrun/core/engine/guard.py
"""
Run Guard: impede duas runs simultâneas da mesma instância de workflow.

Uma run é identificada pelo `workflow_id` da instância que a emitiu.
O guard é uma flag por instância, não uma fila: um segundo pedido
enquanto o primeiro não terminou falha imediatamente com
`AlreadyExecutingError`, sem mutar estado algum.

O conjunto de instâncias ativas é protegido por um `threading.Lock`,
o que permite compartilhar o mesmo guard entre event loops e threads.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Set

from flowrun.core.exceptions import AlreadyExecutingError


class RunGuard:
    """Flag de execução ativa por instância de workflow."""

    def __init__(self) -> None:
        self._active: Set[str] = set()
        self._lock = threading.Lock()

    def acquire(self, workflow_id: str) -> None:
        with self._lock:
            if workflow_id in self._active:
                raise AlreadyExecutingError(workflow_id)
            self._active.add(workflow_id)

    def release(self, workflow_id: str) -> None:
        with self._lock:
            self._active.discard(workflow_id)

    def is_active(self, workflow_id: str) -> bool:
        with self._lock:
            return workflow_id in self._active

    @contextmanager
    def hold(self, workflow_id: str) -> Iterator[None]:
        self.acquire(workflow_id)
        try:
            yield
        finally:
            self.release(workflow_id)
