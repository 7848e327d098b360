from typing import Any, Dict

from dash import dash_table, dcc, html

from .datasource import COLUMNS

PLACEHOLDER = "—"

CARD_STYLE = {
    "border": "1px solid #e0e0e0",
    "borderRadius": "8px",
    "padding": "12px 16px",
    "minWidth": "160px",
    "boxShadow": "0 1px 2px rgba(0,0,0,0.04)",
    "background": "white",
}


def format_amount(x: float) -> str:
    """Compact amount, e.g. 12K, 7M."""
    for unit in ("", "K", "M", "B"):
        if abs(x) < 1000.0:
            return f"{x:,.0f}{unit}"
        x /= 1000.0
    return f"{x:,.0f}T"


def kpi_values(kpis: Dict[str, Any], currency: str = "USD") -> Dict[str, str]:
    if not kpis:
        return {"rev": PLACEHOLDER, "cost": PLACEHOLDER, "profit": PLACEHOLDER, "red": PLACEHOLDER}
    return {
        "rev": f"{format_amount(kpis['revenue'])} {currency}",
        "cost": f"{format_amount(kpis['cost'])} {currency}",
        "profit": f"{format_amount(kpis['profit'])} {currency}",
        "red": str(kpis["red_systems"]),
    }


def kpi_card(label: str, value: str, id_suffix: str):
    return html.Div(
        className="kpi-card",
        children=[
            html.Div(label, className="kpi-label"),
            html.Div(value, className="kpi-value", id=f"kpi-{id_suffix}"),
        ],
        style=CARD_STYLE,
    )


def build_layout(props: Dict[str, Any]):
    """Dashboard layout from the full-load props; deferred props arrive via callbacks."""
    filters = props.get("filters") or {}
    values = kpi_values(props.get("kpis") or {}, props.get("currency", "USD"))

    return html.Div([
        dcc.Download(id="download-data"),

        html.Div([
            html.H2(props.get("title", ""), style={"margin": "0"}),
            html.Div(props.get("subtitle", ""), style={"color": "#666"}),
            html.Div(f"Generated at {props.get('generated_at', PLACEHOLDER)}", id="generated-at",
                     style={"color": "#999", "fontSize": "12px"}),
        ], style={"display": "flex", "flexDirection": "column", "gap": "4px", "marginBottom": "12px"}),

        html.Div([
            dcc.Dropdown(filters.get("products", []), None, id="product-dd", placeholder="Select products",
                         multi=True, style={"minWidth": "220px"}),
            dcc.Dropdown(filters.get("regions", []), None, id="region-dd", placeholder="Select regions",
                         multi=True, style={"minWidth": "220px"}),
            html.Button("Refresh KPIs", id="refresh-btn", n_clicks=0),
            html.Button("Export CSV", id="export-btn", n_clicks=0),
        ], style={"display": "grid", "gridTemplateColumns": "repeat(4, minmax(220px, 1fr))", "gap": "10px",
                  "alignItems": "center"}),

        html.Hr(),

        html.Div(
            id="kpi-row",
            children=[
                kpi_card("Total Revenue", values["rev"], "rev"),
                kpi_card("Total Cost", values["cost"], "cost"),
                kpi_card("Total Profit", values["profit"], "profit"),
                kpi_card("Red Systems (latest day)", values["red"], "red"),
            ],
            style={"display": "flex", "gap": "12px", "flexWrap": "wrap", "marginBottom": "8px"},
        ),

        dcc.Graph(id="trend-graph"),
        dash_table.DataTable(
            id="detail-table",
            columns=[{"name": c, "id": c} for c in COLUMNS],
            page_size=15,
            sort_action="native",
            style_table={"overflowX": "auto"},
            style_cell={"minWidth": 80, "maxWidth": 200, "whiteSpace": "nowrap", "textOverflow": "ellipsis"},
        ),

        html.Div(id="debug-msg", children=str(props["debug"]) if "debug" in props else "",
                 style={"fontSize": "12px", "color": "#999", "marginTop": "6px"}),
    ])
