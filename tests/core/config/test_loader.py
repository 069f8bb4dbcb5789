# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config).

Este módulo valida o comportamento do loader responsável por:
- carregar arquivos de configuração padrão (defaults)
- carregar arquivos de configuração local (override)
- validar estrutura mínima da configuração
- rejeitar formatos e estados inválidos

Decisões arquiteturais:
    - Defaults representam a base canônica do engine
    - Configuração local atua apenas como override explícito
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - A configuração final é sempre um dicionário
    - Nenhuma configuração parcial é retornada em caso de erro
"""

import json
import pytest
from pathlib import Path

try:
    from flowrun.core.config.loader import load_config
    from flowrun.core.config.errors import (
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    DefaultsNotFoundError = None
    InvalidConfigRootTypeError = None
    UnsupportedConfigFormatError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de configuração e suas exceções tipadas estejam disponíveis.

    Decisões arquiteturais:
        - Falha antecipada e explícita quando contratos do loader estão ausentes
        - Não tenta fallback nem implementação alternativa
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/flowrun/core/config/loader.py (load_config)\n"
            "- src/flowrun/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_missing_defaults_raises(tmp_path: Path):
    _require_imports()
    missing = tmp_path / "defaults.yaml"
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(missing), local_path=None)


def test_missing_local_is_ok(tmp_path: Path, engine_config_defaults_yaml):
    """
    A ausência do arquivo local não invalida o carregamento.

    Invariantes:
        - Valores definidos no defaults são preservados integralmente
        - Nenhuma exceção é levantada pela ausência do arquivo local
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(engine_config_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))
    assert out["engine"]["unreached_policy"] == "report"
    assert out["engine"]["node_timeout_seconds"] is None
    assert out["ui"]["channels"] == ["toast"]


def test_local_overrides_defaults(tmp_path: Path, engine_config_defaults_yaml, engine_config_local_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yml"
    defaults.write_text(engine_config_defaults_yaml, encoding="utf-8")
    local.write_text(engine_config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))
    assert out["engine"]["unreached_policy"] == "raise"
    assert out["engine"]["node_timeout_seconds"] is None
    assert out["ui"]["notify"] is True
    assert out["ui"]["channels"] == ["toast", "email"]


def test_json_defaults_are_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"engine": {"node_timeout_seconds": 5}}), encoding="utf-8")
    out = load_config(defaults_path=str(defaults))
    assert out == {"engine": {"node_timeout_seconds": 5}}


def test_empty_yaml_is_empty_dict(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")
    assert load_config(defaults_path=str(defaults)) == {}


def test_unsupported_format_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("[engine]\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults))


def test_non_dict_root_raises(tmp_path: Path):
    """Um YAML cujo root é lista não é uma configuração válida."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults))


def test_load_engine_config_applies_defaults_and_validation(tmp_path: Path):
    """Arquivos parciais recebem os defaults do engine e passam pela validação."""
    _require_imports()
    from flowrun.core.config import InvalidConfigValueError, load_engine_config

    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("engine:\n  node_timeout_seconds: 30\n", encoding="utf-8")
    out = load_engine_config(defaults_path=defaults)
    assert out["engine"] == {"unreached_policy": "report", "node_timeout_seconds": 30}

    local = tmp_path / "local.yaml"
    local.write_text("engine:\n  unreached_policy: skip\n", encoding="utf-8")
    with pytest.raises(InvalidConfigValueError):
        load_engine_config(defaults_path=defaults, local_path=local)
