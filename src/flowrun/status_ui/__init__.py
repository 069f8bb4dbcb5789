from .renderers import (
    RenderResult,
    render_states,
    render_run_notification,
    render_table_html,
)

__all__ = [
    "RenderResult",
    "render_states",
    "render_run_notification",
    "render_table_html",
]
