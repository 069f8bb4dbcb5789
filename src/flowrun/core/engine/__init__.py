# src/flowrun/core/engine/__init__.py
"""
Engine do Flowrun.

Este pacote contém a implementação responsável por **validar** e
**executar** workflows, um nó por vez, respeitando as dependências de
dados declaradas nas arestas.

Componentes principais:
    - graph        → visão de adjacência, indegree e plano FIFO (Kahn)
    - scheduler    → WorkflowEngine: despacho serial, fail-fast e RunResult
    - tracker      → máquina de estados por nó e notificação de listeners
    - guard        → bloqueio de runs concorrentes da mesma instância
    - cancellation → token de cancelamento cooperativo

Invariantes:
    - Nós só são despachados após todos os predecessores terminarem com sucesso
    - Cada nó é despachado no máximo uma vez por run
    - A ordem de despacho é determinística para a mesma definição
"""
