# src/flowrun/core/__init__.py
"""
Core do Flowrun.

Este pacote contém a implementação canônica do motor de execução de
workflows: construção do grafo, despacho serial em ordem topológica e
rastreamento de estados por nó.

Componentes principais:
    - config    → carregamento, merge, validação e hashing de configuração
    - workflow  → tipos canônicos, contrato de invoker, registry e RunContext
    - engine    → graph builder, scheduler, state tracker, run guard e cancelamento
    - errors / exceptions → classificação de falhas e exceções tipadas

Limites explícitos:
    - Não contém lógica de negócio de nenhum tipo de nó
    - Não persiste definições nem resultados
    - Não depende de UI ou transporte
"""
