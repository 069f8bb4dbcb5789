# src/flowrun/core/config/hashing.py
"""
Identidade estável da configuração efetiva.

O hash permite afirmar, olhando apenas dois `RunResult`, se as runs
rodaram sob a mesma configuração.

Invariantes:
    - A ordem das chaves não altera o hash
    - O hash é SHA-256 hexadecimal sobre JSON canônico em UTF-8

Limites explícitos:
    - Não persiste o hash
"""

import hashlib
import json
from typing import Any, Mapping


def canonical_config_bytes(config: Mapping[str, Any]) -> bytes:
    """JSON canônico (chaves ordenadas, sem espaços, UTF-8); valores exóticos via `str`."""
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str).encode(
        "utf-8"
    )


def compute_config_hash(config: Mapping[str, Any]) -> str:
    """
    Identidade da configuração efetiva: SHA-256 hexadecimal do JSON canônico.

    O valor é carimbado em cada `RunResult`, de modo que duas runs com o
    mesmo hash foram executadas sob a mesma configuração.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(f"compute_config_hash espera dict, recebeu {type(config).__name__}")
    return hashlib.sha256(canonical_config_bytes(config)).hexdigest()
