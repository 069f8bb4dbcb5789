# src/flowrun/core/config/merge.py
"""
Deep merge determinístico de configurações.

Usado pelo loader (base + override local) e pelo resolvedor do engine
(`DEFAULT_CONFIG` + config do usuário).

Invariantes:
    - As entradas nunca são mutadas; o resultado é uma cópia profunda
    - Conflitos de tipo abortam o merge inteiro, sem resultado parcial
    - A mensagem de conflito aponta o caminho pontuado da chave

Limites explícitos:
    - Não valida valores de domínio (ver `config.engine`)
    - Não concatena listas
"""

from copy import deepcopy
from numbers import Real
from typing import Any, Dict, Mapping, Tuple

from .errors import ConfigTypeConflictError


def _compatible(current: Any, incoming: Any) -> bool:
    # None na base aceita qualquer tipo.
    if current is None:
        return True
    # bool não é tratado como número.
    if isinstance(current, bool) or isinstance(incoming, bool):
        return type(current) is type(incoming)
    if isinstance(current, Real) and isinstance(incoming, Real):
        return True
    return type(current) is type(incoming)


def _merge_into(target: Dict[str, Any], incoming: Mapping[str, Any], path: Tuple[str, ...]) -> None:
    for key, value in incoming.items():
        where = path + (str(key),)
        if key not in target:
            target[key] = deepcopy(value)
        elif value is None:
            continue
        elif isinstance(target[key], dict) and isinstance(value, dict):
            _merge_into(target[key], value, where)
        elif isinstance(target[key], list) and isinstance(value, list):
            target[key] = deepcopy(value)
        elif _compatible(target[key], value):
            target[key] = deepcopy(value)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{'.'.join(where)}': "
                f"{type(target[key]).__name__} não pode ser sobrescrito por {type(value).__name__}"
            )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e retorna um novo dicionário.

    Regras:
        - mapeamentos são mesclados chave a chave, recursivamente
        - listas do override substituem a lista da base por inteiro
        - `None` na base aceita um valor de qualquer tipo
        - `None` no override vale "não definido" e preserva o valor da base
        - int e float se substituem livremente; bool só por bool
        - qualquer outro par de tipos distintos é conflito

    Nenhum dos argumentos é mutado.

    Raises:
        ConfigTypeConflictError: No primeiro conflito, com o caminho
            pontuado da chave (ex.: `engine.unreached_policy`).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"deep_merge espera dois dicts, recebeu {type(base).__name__} e {type(override).__name__}"
        )
    merged = deepcopy(base)
    _merge_into(merged, override, ())
    return merged
