# tests/conftest.py
"""
Fixtures compartilhados para testes do Flowrun.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- invokers de teste que registram chamadas e inputs
- relógio injetável e determinístico
- fábrica de engines com registry pré-configurado

O objetivo destas fixtures é permitir testes do core
(config, workflow e engine) sem depender de:
- rede ou serviços externos
- relógio real
- implementações reais de tipos de nó

Notas:
    - Os invokers de teste satisfazem `NodeInvoker` por duck typing
    - O relógio avança um segundo por leitura, tornando timestamps
      estritamente crescentes e comparáveis
    - Nenhuma fixture dispara uma run ou toca o disco; cada teste
      recebe instâncias novas
"""

import pytest

from tests.fixtures.invokers import FakeClock, RecordingInvoker


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def engine_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
    """
    return (
        "engine:\n"
        "  unreached_policy: report\n"
        "  node_timeout_seconds: null\n"
        "ui:\n"
        "  notify: true\n"
        "  channels: [toast]\n"
    )


@pytest.fixture
def engine_config_local_yaml() -> str:
    """YAML de override local: ajusta apenas parte das chaves."""
    return (
        "engine:\n"
        "  unreached_policy: raise\n"
        "ui:\n"
        "  channels: [toast, email]\n"
    )


# =====================================================
# Invokers e relógio
# =====================================================

@pytest.fixture
def recording_invoker():
    return RecordingInvoker()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_engine(fake_clock):
    """
    Fábrica de `WorkflowEngine` com o invoker informado como default.

    O import do core é lazy para que falhas de import apareçam no teste
    que as provoca, e não na coleta.
    """
    from flowrun.core.engine.scheduler import WorkflowEngine
    from flowrun.core.workflow.registry import InvokerRegistry

    def _make(invoker=None, *, config=None, guard=None, registry=None):
        if registry is None:
            registry = InvokerRegistry(default=invoker or RecordingInvoker())
        return WorkflowEngine(registry=registry, config=config, guard=guard, clock=fake_clock)

    return _make


@pytest.fixture
def chain_definition():
    """Cadeia n1 → n2 → n3 no formato do store de definições."""
    return {
        "nodes": [
            {"id": "n1", "type": "task"},
            {"id": "n2", "type": "task"},
            {"id": "n3", "type": "task"},
        ],
        "edges": [
            {"id": "e1", "source": "n1", "target": "n2"},
            {"id": "e2", "source": "n2", "target": "n3"},
        ],
    }
