# src/flowrun/core/config/__init__.py

"""
Camada de configuração do Flowrun.

Este pacote carrega, mescla, valida e identifica a configuração do
motor de execução.

Responsabilidades do pacote:
    - Carregamento de arquivos (defaults + overrides locais, YAML ou JSON)
    - Resolução via deep-merge determinístico
    - Validação das chaves que o engine efetivamente consome
    - Hash canônico para carimbar cada RunResult

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - A mesma entrada sempre produz a mesma configuração final
    - Conflitos estruturais são tratados como erro
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, load_engine_config, read_config_file
from .merge import deep_merge
from .engine import DEFAULT_CONFIG, UNREACHED_POLICIES, resolve_engine_config

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "load_engine_config",
    "read_config_file",
    "deep_merge",
    "DEFAULT_CONFIG",
    "UNREACHED_POLICIES",
    "resolve_engine_config",
]
