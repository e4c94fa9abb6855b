"""Dash front end for the simulation demo pages.

Run with:
    python -m simulation_pages.visualization.dash_app

Opens at http://127.0.0.1:7860
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

import plotly.graph_objects as go

import dash
from dash import dcc, html, ctx, Input, Output, State, ALL, no_update

from ..config import Settings, configure_logging
from ..core.contracts import ModelBinding
from ..page.catalog import DEMOS, DemoSpec
from ..page.controller import PageController
from ..page.controls import Control
from ..page.models import load_bindings
from ..playback.scheduler import ManualScheduler
from ..rendering.stats import RenderStats

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Dark plotly theme
# ═══════════════════════════════════════════════════════════════════════

_LAYOUT_DEFAULTS = dict(
    template="plotly_dark",
    paper_bgcolor="#0a0a0f",
    plot_bgcolor="#0a0a0f",
    font=dict(family="Inter, -apple-system, sans-serif", color="#e8eaed"),
    margin=dict(l=40, r=20, t=40, b=30),
    height=220,
    uirevision="stable",
)

_INDEX_STRING = """<!DOCTYPE html>
<html>
<head>
    {%metas%}
    <title>{%title%}</title>
    {%favicon%}
    {%css%}
    <style>
        :root {
            --bg-base: #0a0a0f;
            --bg-surface: rgba(15, 15, 25, 0.8);
            --bg-elevated: rgba(25, 25, 45, 0.6);
            --glass-border: rgba(255, 255, 255, 0.08);
            --text-primary: #e8eaed;
            --text-secondary: #9aa0a6;
            --text-muted: #5f6368;
            --accent: #7c5cfc;
            --radius-md: 12px;
        }
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            background: var(--bg-base); color: var(--text-primary);
            font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
            line-height: 1.6;
        }
        .sidebar {
            position: fixed; top: 0; left: 0; bottom: 0; width: 320px;
            background: var(--bg-surface); border-right: 1px solid var(--glass-border);
            padding: 24px 20px; overflow-y: auto;
        }
        .sidebar label {
            display: block; margin: 10px 0 4px 0;
            color: var(--text-secondary); font-size: 0.8em; font-weight: 500;
        }
        .sidebar input, .sidebar textarea { width: 100%; }
        .sidebar textarea { font-family: monospace; min-height: 160px; }
        .sidebar-section-header {
            font-size: 0.65em; color: var(--text-muted); text-transform: uppercase;
            letter-spacing: 0.12em; font-weight: 600; margin: 16px 0 8px 0;
        }
        .main-area { margin-left: 320px; padding: 24px 32px; }
        .control-bar { display: flex; gap: 10px; margin: 16px 0; align-items: center; }
        .control-bar button {
            padding: 8px 18px; border: 1px solid var(--glass-border);
            border-radius: var(--radius-md); background: var(--bg-elevated);
            color: var(--text-primary); cursor: pointer;
        }
        .status-badge { color: var(--text-secondary); font-size: 0.85em; margin: 8px 0; }
        .caption { color: var(--text-secondary); white-space: pre-line; margin: 8px 0 16px 0; }
        .demo-grid {
            display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr));
            gap: 16px; margin-top: 24px;
        }
        .demo-card {
            padding: 16px; border: 1px solid var(--glass-border);
            border-radius: var(--radius-md); background: var(--bg-elevated);
            color: var(--text-primary); height: 100%;
        }
        .demo-card.disabled { opacity: 0.4; }
        .demo-card h3 { font-size: 1.05em; margin-bottom: 6px; }
        .demo-card p { color: var(--text-secondary); font-size: 0.85em; }
        .welcome-page { max-width: 1100px; margin: 0 auto; padding: 48px 24px; }
        .section-title { margin-top: 32px; color: var(--accent); }
    </style>
</head>
<body>
    {%app_entry%}
    <footer>
        {%config%}
        {%scripts%}
        {%renderer%}
    </footer>
</body>
</html>"""

# Reports the surface container's width and the device pixel ratio, only
# when either changed, so the server sees one event per real resize.
_VIEWPORT_JS = """
function(n, previous) {
    var el = document.getElementById("surface-container");
    if (!el) { return window.dash_clientside.no_update; }
    var data = {width: el.offsetWidth, dpr: window.devicePixelRatio || 1.0};
    if (previous && previous.width === data.width && previous.dpr === data.dpr) {
        return window.dash_clientside.no_update;
    }
    return data;
}
"""


# ═══════════════════════════════════════════════════════════════════════
#  Layout builders
# ═══════════════════════════════════════════════════════════════════════


def _control_component(control: Control) -> Any:
    spec = control.spec
    cid = {"type": "control", "name": spec.name}
    if spec.widget == "select":
        return dcc.Dropdown(
            id=cid,
            options=[{"label": label, "value": value} for label, value in spec.options],
            value=control.value,
            clearable=False,
            style={"color": "#0a0a0f"},
        )
    if spec.widget == "textarea":
        return dcc.Textarea(id=cid, value=control.value)
    if spec.widget == "text":
        return dcc.Input(id=cid, type="text", value=control.value)
    return dcc.Input(
        id=cid, type="number", value=control.value,
        min=spec.min, max=spec.max, step=spec.step,
    )


def _welcome_layout(pages: Mapping[str, PageController]) -> Any:
    sections: dict[str, list[Any]] = {}
    for slug, demo in DEMOS.items():
        loaded = slug in pages
        card = html.Div([
            html.H3(demo.title),
            html.P(demo.description if loaded else "Model not loaded."),
        ], className="demo-card" if loaded else "demo-card disabled")
        if loaded:
            card = html.A(card, href=f"/demo/{slug}", style={"textDecoration": "none"})
        sections.setdefault(demo.section, []).append(card)

    children: list[Any] = [
        html.H1("Simulation Pages"),
        html.P("Interactive demos of dynamical systems, stochastic kinetics and cellular automata."),
    ]
    for section, cards in sections.items():
        children.append(html.H2(section, className="section-title"))
        children.append(html.Div(cards, className="demo-grid"))
    return html.Div(children, className="welcome-page")


def _demo_layout(page: PageController, settings: Settings) -> Any:
    demo = page.demo
    controls = [
        c for c in page.controls if c.name != demo.step_control
    ]
    playback_style = {} if demo.stateful else {"display": "none"}
    step_max, step_index = 0, 0
    if page.playback is not None:
        step_max, step_index = page.playback.max_step, page.playback.index

    return html.Div([
        # ── Sidebar ──────────────────────────────────────────────────
        html.Div([
            html.A("← All demos", href="/", style={"color": "#9aa0a6"}),
            html.H2(demo.title, style={"margin": "12px 0"}),
            html.Div("Parameters", className="sidebar-section-header"),
            *[
                html.Div([html.Label(c.spec.label), _control_component(c)])
                for c in controls
            ],
        ], className="sidebar"),

        # ── Main area ────────────────────────────────────────────────
        html.Div([
            html.P(demo.description),

            html.Div([
                html.Button("Rewind", id="btn-rewind", n_clicks=0),
                html.Button("Play", id="btn-play-pause", n_clicks=0),
                html.Div(
                    dcc.Slider(id="step-slider", min=0, max=step_max, step=1, value=step_index,
                               marks=None, tooltip={"placement": "bottom"}),
                    style={"flex": "1"},
                ),
            ], className="control-bar", style=playback_style),

            html.Div(id="status", className="status-badge"),
            html.Div(html.Img(id="surface-img"), id="surface-container"),
            html.Div(id="caption", className="caption"),

            dcc.Graph(id="latency-graph", config={"displayModeBar": False}),

            # Hidden components
            dcc.Interval(id="playback-interval", interval=settings.frame_interval_ms, disabled=True),
            dcc.Interval(id="viewport-poll", interval=500),
            dcc.Store(id="viewport-store"),
        ], className="main-area"),
    ])


def _latency_figure(stats: RenderStats, slug: str) -> go.Figure:
    frame = stats.to_frame(slug).tail(50)
    fig = go.Figure()
    if not frame.empty:
        colors = ["#34d399" if o == "success" else "#f87171" for o in frame["outcome"]]
        fig.add_trace(go.Bar(
            x=list(range(len(frame))), y=frame["latency_ms"],
            marker_color=colors, hovertext=frame["outcome"],
        ))
    summary = stats.summary(slug)
    fig.update_layout(
        title=f"Render latency (mean {summary['mean_ms']:.1f} ms, max {summary['max_ms']} ms)",
        xaxis_title="render", yaxis_title="ms",
        **_LAYOUT_DEFAULTS,
    )
    return fig


# ═══════════════════════════════════════════════════════════════════════
#  App factory
# ═══════════════════════════════════════════════════════════════════════


def create_pages(
    bindings: Mapping[str, ModelBinding],
    settings: Settings,
    stats: RenderStats,
) -> dict[str, PageController]:
    pages: dict[str, PageController] = {}
    for slug, binding in bindings.items():
        demo: DemoSpec | None = DEMOS.get(slug)
        if demo is None:
            logger.warning("no demo page declared for model %r; skipping", slug)
            continue
        pages[slug] = PageController(
            demo, binding,
            scheduler=ManualScheduler(),
            stats=stats,
            interval_ms=settings.frame_interval_ms,
            scale_backing_store=settings.scale_backing_store,
        )
    return pages


def create_app(
    bindings: Mapping[str, ModelBinding],
    settings: Settings | None = None,
) -> dash.Dash:
    settings = settings or Settings()
    stats = RenderStats()
    pages = create_pages(bindings, settings, stats)
    locks = {slug: threading.Lock() for slug in pages}

    app = dash.Dash(
        __name__,
        title="Simulation Pages",
        suppress_callback_exceptions=True,
    )
    app.index_string = _INDEX_STRING
    app.layout = html.Div([
        dcc.Location(id="url", refresh=False),
        html.Div(id="page-content"),
    ])

    def _page_for(pathname: str | None) -> PageController | None:
        if not pathname or not pathname.startswith("/demo/"):
            return None
        return pages.get(pathname[len("/demo/"):].strip("/"))

    # ── CB0: URL routing ─────────────────────────────────────────────

    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
    )
    def display_page(pathname):
        page = _page_for(pathname)
        if page is None:
            return _welcome_layout(pages)
        return _demo_layout(page, settings)

    # ── CB1: Viewport measurement (browser side) ─────────────────────

    app.clientside_callback(
        _VIEWPORT_JS,
        Output("viewport-store", "data"),
        Input("viewport-poll", "n_intervals"),
        State("viewport-store", "data"),
    )

    # ── CB2: Every page event -> controller -> render ────────────────

    @app.callback(
        Output("surface-img", "src"),
        Output("surface-img", "style"),
        Output("status", "children"),
        Output("caption", "children"),
        Output({"type": "control", "name": ALL}, "value"),
        Output("step-slider", "max"),
        Output("step-slider", "value"),
        Output("playback-interval", "disabled"),
        Output("btn-play-pause", "children"),
        Output("latency-graph", "figure"),
        Input({"type": "control", "name": ALL}, "value"),
        Input("step-slider", "value"),
        Input("viewport-store", "data"),
        Input("btn-rewind", "n_clicks"),
        Input("btn-play-pause", "n_clicks"),
        Input("playback-interval", "n_intervals"),
        State("url", "pathname"),
    )
    def page_event(control_values, step_value, viewport, rewind_clicks,
                   play_clicks, interval_ticks, pathname):
        page = _page_for(pathname)
        if page is None:
            return (no_update,) * 10

        viewport = viewport or {}
        width = viewport.get("width") or settings.container_width
        dpr = viewport.get("dpr") or 1.0
        value = ctx.triggered[0]["value"] if ctx.triggered else None
        ids = [item["id"]["name"] for item in ctx.outputs_list[4]]
        return handle_event(
            page, locks[page.demo.slug], ctx.triggered_id, value,
            width, dpr, ids, stats,
        )

    return app


# ═══════════════════════════════════════════════════════════════════════
#  Event dispatch
# ═══════════════════════════════════════════════════════════════════════


def _dispatch(page: PageController, triggered: Any, value: Any,
              width: float, dpr: float) -> None:
    if not page.mounted:
        page.main(width, dpr)
    elif isinstance(triggered, dict) and triggered.get("type") == "control":
        page.on_input(triggered["name"], value)
    elif triggered == "step-slider":
        if page.playback is not None and value != page.playback.index:
            page.on_input(page.demo.step_control, value)
    elif triggered == "viewport-store":
        page.on_resize(width, dpr)
    elif triggered == "btn-rewind":
        page.on_rewind()
    elif triggered == "btn-play-pause":
        page.on_play_pause()
    elif triggered == "playback-interval" and page.playback is not None:
        page.playback.scheduler.run_pending()
    else:
        page.render()


def _outputs(page: PageController, control_ids: list[str], stats: RenderStats) -> tuple:
    values = [page.controls.get(name) for name in control_ids]

    playing = page.playback is not None and page.playback.playing
    step_max, step_index = 0, 0
    if page.playback is not None:
        step_max, step_index = page.playback.max_step, page.playback.index

    element = page.element
    style = {"width": f"{element.css_width}px", "height": f"{element.css_height}px"}
    return (
        page.snapshot(), style,
        page.status.status, page.status.caption,
        values,
        step_max, step_index,
        not playing, "Pause" if playing else "Play",
        _latency_figure(stats, page.demo.slug),
    )


def handle_event(
    page: PageController,
    lock: threading.Lock,
    triggered: Any,
    value: Any,
    width: float,
    dpr: float,
    control_ids: list[str],
    stats: RenderStats,
) -> tuple:
    """Apply one browser event to *page* and collect the callback outputs.

    The Flask server handles requests on several threads; *lock* is held
    for the whole event so renders of one page never overlap.
    """
    with lock:
        _dispatch(page, triggered, value, width, dpr)
        return _outputs(page, control_ids, stats)


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(load_bindings(*settings.model_modules), settings)
    app.run(host=settings.host, debug=settings.debug, port=settings.port)


if __name__ == "__main__":
    main()
