# src/flowrun/core/engine/cancellation.py
"""
Token de cancelamento cooperativo de runs.

O token é verificado pelo Scheduler antes de cada despacho e disputado
contra cada invocação assíncrona em andamento, permitindo abortar uma
run sem esperar o nó corrente terminar.

Invariantes:
    - O token não se prende a nenhum event loop: cada `wait()` cria seu
      future no loop em execução, então o mesmo token serve a várias runs
    - Uma vez cancelado, o token permanece cancelado

Limites explícitos:
    - `cancel()` deve ser chamado da thread do event loop da run
    - Não interrompe invokers síncronos já em execução
"""

from __future__ import annotations

import asyncio
from typing import List, Optional


class CancellationToken:
    """Sinal de cancelamento compartilhado entre chamador e Scheduler."""

    def __init__(self) -> None:
        self._cancelled = False
        self._waiters: List["asyncio.Future[None]"] = []
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason
        for waiter in list(self._waiters):
            if not waiter.done():
                waiter.set_result(None)

    async def wait(self) -> None:
        if self._cancelled:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            self._waiters.remove(waiter)
