# src/flowrun/core/errors.py
"""
Flowrun: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Flowrun.
Erros são artefatos de execução e fazem parte do contrato operacional
do motor, devendo ser:

- explícitos
- serializáveis
- classificáveis
- acionáveis

Nenhuma decisão de retry é tomada aqui: `retryable` é apenas informativo
para o chamador, que decide se reexecuta a run inteira.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Categorias
# ---------------------------------------------------------------------------

class ErrorCategory(str, Enum):
    """Categorias estáveis para classificação de falhas de nós."""

    CONNECTION = "CONNECTION"
    AUTHENTICATION = "AUTHENTICATION"
    VALIDATION = "VALIDATION"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    DATA_PROCESSING = "DATA_PROCESSING"
    CANCELLED = "CANCELLED"
    SYSTEM = "SYSTEM"
    UNKNOWN = "UNKNOWN"


RETRYABLE_CATEGORIES = frozenset(
    {ErrorCategory.CONNECTION, ErrorCategory.TIMEOUT, ErrorCategory.RATE_LIMIT}
)

_HINTS: Dict[ErrorCategory, str] = {
    ErrorCategory.CONNECTION: "Verifique a conectividade de rede e o status do serviço externo",
    ErrorCategory.AUTHENTICATION: "Verifique credenciais e permissões da integração",
    ErrorCategory.VALIDATION: "Verifique o formato dos inputs e a configuração do nó",
    ErrorCategory.TIMEOUT: "Aumente engine.node_timeout_seconds ou otimize a operação do nó",
    ErrorCategory.RATE_LIMIT: "Reduza a taxa de chamadas ou aguarde a janela de quota",
    ErrorCategory.DATA_PROCESSING: "Valide o formato dos dados e a lógica de transformação",
    ErrorCategory.CANCELLED: "A run foi cancelada pelo chamador; reexecute se necessário",
    ErrorCategory.SYSTEM: "Verifique recursos do sistema e a configuração do engine",
    ErrorCategory.UNKNOWN: "Consulte o event log da run para mais detalhes",
}

# Ordem importa: a primeira regra que casar define a categoria.
_MESSAGE_RULES = (
    (ErrorCategory.CONNECTION, ("econnreset", "etimedout", "socket hang up", "connection refused", "connection reset")),
    (ErrorCategory.RATE_LIMIT, ("rate limit", "quota exceeded", "too many requests")),
    (ErrorCategory.VALIDATION, ("validation failed", "invalid input")),
    (ErrorCategory.AUTHENTICATION, ("unauthorized", "forbidden")),
    (ErrorCategory.TIMEOUT, ("timeout", "timed out")),
    (ErrorCategory.DATA_PROCESSING, ("data processing", "transform error")),
)


def classify_error(exc: BaseException) -> ErrorCategory:
    """
    Classifica uma exceção em uma `ErrorCategory` estável.

    A classificação considera primeiro o tipo da exceção (timeouts,
    conexão, permissão) e depois palavras-chave da mensagem, na ordem
    declarada em `_MESSAGE_RULES`.

    Args:
        exc (BaseException): Exceção levantada por um invoker.

    Returns:
        ErrorCategory: Categoria estável do erro.
    """
    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION
    if isinstance(exc, PermissionError):
        return ErrorCategory.AUTHENTICATION

    message = (str(exc) or "").lower()
    for category, keywords in _MESSAGE_RULES:
        if any(k in message for k in keywords):
            return category

    return ErrorCategory.UNKNOWN


def hint_for(category: ErrorCategory) -> str:
    return _HINTS.get(category, _HINTS[ErrorCategory.UNKNOWN])


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorInfo:
    """
    Payload canônico de erro do Flowrun.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    - category: categoria estável (ver `ErrorCategory`)
    - retryable: indica ao chamador se reexecutar a run tende a resolver
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    category: ErrorCategory = ErrorCategory.UNKNOWN
    retryable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        data = asdict(self)
        data["category"] = self.category.value
        return data


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Grafo
GRAPH_INTEGRITY_ERROR = "GRAPH_INTEGRITY_ERROR"
CYCLE_DETECTED = "CYCLE_DETECTED"

# Execução
NODE_EXECUTION_ERROR = "NODE_EXECUTION_ERROR"
RUN_CANCELLED = "RUN_CANCELLED"
ALREADY_EXECUTING = "ALREADY_EXECUTING"

# Engine / Configuração
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def node_execution_error(*, node_id: str, node_type: str, cause: BaseException) -> ErrorInfo:
    """
    Constrói o payload de falha de um nó a partir da causa original.

    O stack trace nunca é embutido no payload; apenas a classe e a
    mensagem da causa são preservadas em `details`.
    """
    category = classify_error(cause)
    return ErrorInfo(
        type=NODE_EXECUTION_ERROR,
        message=str(cause) or f"Node '{node_id}' failed",
        details={
            "node_id": node_id,
            "node_type": node_type,
            "exception_class": cause.__class__.__name__,
        },
        hint=hint_for(category),
        category=category,
        retryable=category in RETRYABLE_CATEGORIES,
    )


def run_cancelled(*, reason: Optional[str], node_id: Optional[str] = None) -> ErrorInfo:
    return ErrorInfo(
        type=RUN_CANCELLED,
        message=reason or "Run cancelled",
        details={"node_id": node_id},
        hint=hint_for(ErrorCategory.CANCELLED),
        category=ErrorCategory.CANCELLED,
        retryable=False,
    )


def cycle_detected(*, stranded: list) -> ErrorInfo:
    return ErrorInfo(
        type=CYCLE_DETECTED,
        message="Nodes never became ready (cycle or stranded dependency)",
        details={"nodes": list(stranded)},
        hint="Remova o ciclo entre os nós listados ou ajuste as arestas do workflow",
        category=ErrorCategory.VALIDATION,
        retryable=False,
    )
