# src/flowrun/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Flowrun.

Exceções aqui representam violações estruturais da configuração,
detectadas antes de qualquer run, e nunca falhas de execução de nós.
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do Flowrun.

    Permite captura genérica de falhas de carregamento, merge e
    validação, distinta das falhas de execução do engine.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório no `load_config`
        - Não há criação implícita de defaults em disco
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo de configuração não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"unreached_policy": "report"}}
        - override: {"engine": ["raise"]}
    """


class InvalidConfigValueError(ConfigError):
    """Valor fora do domínio aceito por uma chave consumida pelo engine."""
