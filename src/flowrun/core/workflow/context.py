# src/flowrun/core/workflow/context.py
"""
Contexto de execução explícito de uma run do workflow.

Este módulo define o `RunContext`, a estrutura que o Scheduler passa por
referência ao longo de uma run, concentrando todo o estado mutável:

    - visão do grafo (imutável)
    - mapa de resultados por nó
    - State Tracker
    - event log estruturado

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Nenhum estado sobrevive fora da chamada que criou o contexto
    - Logs são eventos estruturados, não strings livres

Invariantes:
    - Logs sempre incluem `run_id`, `workflow_id` e `node_id`
    - `results` só contém nós que terminaram com sucesso
    - O contexto é mutado apenas pelo Scheduler da run ativa

Limites explícitos:
    - Não executa nós
    - Não decide políticas de execução
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from flowrun.core.engine.graph import GraphView
    from flowrun.core.engine.tracker import StateTracker


@dataclass
class RunContext:
    """
    Contexto de execução de uma run.

    Campos canônicos:
    - run_id: identificador único da execução
    - workflow_id: instância de workflow que emitiu a run
    - created_at: timestamp UTC de criação do contexto
    - config: configuração efetiva do engine
    - graph: visão de adjacência validada
    - tracker: estados por nó
    - results: saída de cada nó concluído com sucesso
    - events: log estruturado de eventos
    """

    run_id: str
    workflow_id: str
    created_at: datetime
    config: Dict[str, Any]
    graph: "GraphView"
    tracker: "StateTracker"

    results: Dict[str, Any] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    # -----------------------------
    # Resultados
    # -----------------------------
    def set_result(self, node_id: str, value: Any) -> None:
        self.results[node_id] = value

    def has_result(self, node_id: str) -> bool:
        return node_id in self.results

    def get_result(self, node_id: str) -> Any:
        if node_id not in self.results:
            raise KeyError(node_id)
        return self.results[node_id]

    def inputs_for(self, node_id: str) -> Dict[str, Any]:
        """Monta os inputs de um nó a partir dos resultados dos predecessores.

        Cada aresta de entrada contribui `results[source]` sob a chave
        `target_handle` (default "input"); em handles repetidos, a última
        aresta declarada prevalece.
        """
        inputs: Dict[str, Any] = {}
        for edge in self.graph.incoming.get(node_id, ()):
            inputs[edge.input_key] = self.get_result(edge.source)
        return inputs

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, node_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "workflow_id": self.workflow_id,
            "node_id": node_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
