# src/flowrun/core/config/engine.py
"""
Configuração efetiva do WorkflowEngine.

Chaves consumidas (v1):

    engine:
      unreached_policy: report   # report | raise
      node_timeout_seconds: null # null | número > 0

- `report`: nós nunca despachados aparecem em `RunResult.unreached`
  e a run termina com status `incomplete`.
- `raise`: ao esvaziar a fila com nós presos, a run levanta
  `CycleDetectedError` com o RunResult parcial.
- `node_timeout_seconds`: limite por invocação assíncrona; estourar o
  limite falha o nó com categoria TIMEOUT.

Chaves desconhecidas são preservadas (o engine apenas as ignora).
"""

from __future__ import annotations

from copy import deepcopy
from numbers import Real
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConfigRootTypeError, InvalidConfigValueError
from .merge import deep_merge


UNREACHED_POLICIES = ("report", "raise")

DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "unreached_policy": "report",
        "node_timeout_seconds": None,
    },
}


def resolve_engine_config(config: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Aplica a configuração do usuário sobre `DEFAULT_CONFIG` e valida o resultado.

    Raises:
        InvalidConfigRootTypeError: Se `config` não for um mapeamento.
        ConfigTypeConflictError: Se houver conflito de tipos no merge.
        InvalidConfigValueError: Se algum valor estiver fora do domínio.
    """
    if config is None:
        return deepcopy(DEFAULT_CONFIG)
    if not isinstance(config, Mapping):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(config).__name__}"
        )

    effective = deep_merge(DEFAULT_CONFIG, dict(config))
    engine_cfg = effective.get("engine") or {}

    policy = engine_cfg.get("unreached_policy")
    if policy not in UNREACHED_POLICIES:
        raise InvalidConfigValueError(
            f"engine.unreached_policy deve ser um de {list(UNREACHED_POLICIES)}, recebido: {policy!r}"
        )

    timeout = engine_cfg.get("node_timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, Real) or timeout <= 0:
            raise InvalidConfigValueError(
                f"engine.node_timeout_seconds deve ser null ou número > 0, recebido: {timeout!r}"
            )

    return effective
