# src/flowrun/core/workflow/__init__.py
"""
Modelo de workflow do Flowrun.

Reúne os tipos da definição (Node, Edge), a máquina de estados por nó,
o contrato `NodeInvoker`, o registry por tipo de nó e o `RunContext`.
"""
