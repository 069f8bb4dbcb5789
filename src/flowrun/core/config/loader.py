# src/flowrun/core/config/loader.py
"""
Leitura de arquivos de configuração do Flowrun.

A configuração de uma run nasce de dois arquivos:
    - um arquivo base (obrigatório), tipicamente versionado
    - um override local (opcional), tipicamente fora do controle de versão

Responsabilidades:
    - Escolher o parser pela extensão (`.yaml`, `.yml`, `.json`)
    - Exigir um mapeamento na raiz de cada documento
    - Aplicar o override sobre a base via `deep_merge`
    - Oferecer `load_engine_config`, que já devolve a config validada

Invariantes:
    - Documento vazio equivale a `{}`
    - O arquivo base nunca é alterado pelo override
    - Override ausente no disco é ignorado silenciosamente

Limites explícitos:
    - Não observa mudanças nos arquivos
    - Não interpola variáveis de ambiente
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO, Union

import yaml  # PyYAML

from .engine import resolve_engine_config
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge

PathLike = Union[str, Path]

_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_config_file(path: PathLike) -> Dict[str, Any]:
    """
    Lê um único arquivo de configuração (YAML ou JSON) como dicionário.

    Um arquivo vazio vale `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não estiver em `_PARSERS`.
        InvalidConfigRootTypeError: Se o documento não tiver um mapeamento na raiz.
    """
    file = Path(path)
    if not file.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {file}")

    parser = _PARSERS.get(file.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {file.suffix or '(sem extensão)'}; use {sorted(_PARSERS)}"
        )

    with file.open("r", encoding="utf-8") as fh:
        document = parser(fh)

    document = {} if document is None else document
    if not isinstance(document, dict):
        raise InvalidConfigRootTypeError(
            f"{file.name}: a raiz da configuração deve ser um mapeamento, não {type(document).__name__}"
        )
    return document


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração a partir de um arquivo base e de um override local.

    O override local é opcional e, se o caminho não existir, simplesmente
    ignorado. Quando presente, é aplicado sobre a base via `deep_merge`.

    Args:
        defaults_path: Arquivo base, obrigatório.
        local_path: Arquivo de override, opcional.

    Raises:
        DefaultsNotFoundError: Se o arquivo base não existir.
        UnsupportedConfigFormatError: Se algum arquivo tiver extensão não suportada.
        InvalidConfigRootTypeError: Se algum arquivo não for um mapeamento.
        ConfigTypeConflictError: Se o override conflitar com a base.
    """
    config = read_config_file(defaults_path)
    if local_path is not None and Path(local_path).exists():
        config = deep_merge(config, read_config_file(local_path))
    return config


def load_engine_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """`load_config` seguido de `resolve_engine_config` (defaults do engine + validação)."""
    return resolve_engine_config(load_config(defaults_path=defaults_path, local_path=local_path))
