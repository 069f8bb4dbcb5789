# src/flowrun/status_ui/renderers.py
"""
Status UI Adapter (v1)

Objetivo:
- Renderizar o estado por nó de uma run e a notificação agregada final.
- NÃO altera estados nem resultados.
- NÃO executa nós nem acessa o Scheduler.
- Lê apenas atributos públicos (duck typing sobre ExecutionState/RunResult).

Saídas:
- HTML (string) quando possível
- fallback textual sempre preenchido
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
import html


@dataclass(frozen=True)
class RenderResult:
    """Resultado de renderização (apenas apresentação)."""
    html: Optional[str]  # HTML string (quando aplicável)
    text: str            # fallback textual (sempre preenchido)


_COLUMNS = ("node", "status", "duration_ms", "error")


def _escape(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def _value(enum_or_str: Any) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


def _state_row(node_id: str, state: Any) -> Dict[str, Any]:
    error = getattr(state, "error", None)
    return {
        "node": node_id,
        "status": _value(getattr(state, "status", None)),
        "duration_ms": getattr(state, "duration_ms", None),
        "error": getattr(error, "message", None),
    }


def render_table_html(rows: Sequence[Mapping[str, Any]], columns: Sequence[str], title: Optional[str] = None) -> str:
    """Renderiza linhas (dicts) como tabela HTML, na ordem de `columns`."""
    heading = f"<h4>{_escape(title)}</h4>" if title else ""

    if not rows:
        return f"{heading}<div><em>(empty)</em></div>"

    th = "".join(f"<th>{_escape(c)}</th>" for c in columns)
    trs = []
    for row in rows:
        tds = "".join(f"<td>{_escape(row.get(c))}</td>" for c in columns)
        trs.append(f"<tr data-status='{_escape(row.get('status'))}'>{tds}</tr>")

    return (
        f"{heading}"
        "<table>"
        f"<thead><tr>{th}</tr></thead>"
        "<tbody>" + "".join(trs) + "</tbody>"
        "</table>"
    )


def _render_table_text(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> str:
    if not rows:
        return "(empty)"
    cells: List[List[str]] = [list(columns)]
    for row in rows:
        cells.append(["-" if row.get(c) is None else str(row.get(c)) for c in columns])
    widths = [max(len(line[i]) for line in cells) for i in range(len(columns))]
    lines = ["  ".join(v.ljust(widths[i]) for i, v in enumerate(line)).rstrip() for line in cells]
    return "\n".join(lines)


def render_states(states: Mapping[str, Any], title: Optional[str] = None) -> RenderResult:
    """
    Renderiza o snapshot do State Tracker como tabela por nó.

    Colunas: node, status, duration_ms, error (mensagem).
    A ordem das linhas segue a ordem do mapeamento recebido.
    """
    rows = [_state_row(node_id, state) for node_id, state in states.items()]
    return RenderResult(
        html=render_table_html(rows, _COLUMNS, title=title),
        text=_render_table_text(rows, _COLUMNS),
    )


def render_run_notification(result: Any) -> RenderResult:
    """
    Notificação agregada única de uma run encerrada.

    - success: "Workflow executed successfully (N nodes)"
    - error: identifica o nó que falhou e a mensagem
    - cancelled / incomplete: status e nós não alcançados
    """
    status = _value(getattr(result, "status", None))
    states = getattr(result, "states", {}) or {}
    done = sum(1 for s in states.values() if _value(getattr(s, "status", None)) == "success")
    total = len(states)
    error = getattr(result, "error", None)
    unreached = list(getattr(result, "unreached", []) or [])

    if status == "success":
        level = "success"
        message = f"Workflow executed successfully ({done}/{total} nodes)"
    elif status == "error":
        level = "error"
        failed = next(
            (nid for nid, s in states.items() if _value(getattr(s, "status", None)) == "error"),
            None,
        )
        reason = getattr(error, "message", None) or "unknown error"
        if failed is not None:
            message = f"Workflow failed at node '{failed}': {reason}"
        else:
            message = f"Workflow failed: {reason}"
    elif status == "cancelled":
        level = "warning"
        message = f"Workflow cancelled after {done}/{total} nodes"
    else:
        level = "warning"
        message = f"Workflow incomplete: {done}/{total} nodes executed; unreached: {', '.join(unreached)}"

    hint = getattr(error, "hint", None)
    text = message if not hint else f"{message}\n{hint}"
    html_out = (
        f"<div class='flowrun-notification flowrun-{_escape(level)}'>"
        f"<strong>{_escape(message)}</strong>"
        + (f"<div style='opacity:0.75'>{_escape(hint)}</div>" if hint else "")
        + "</div>"
    )
    return RenderResult(html=html_out, text=text)
