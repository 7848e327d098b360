import datetime as dt
from typing import Any, Dict, List, Optional

import pandas as pd
from dash import Input, Output, State, no_update

from dataproviders import DashPage

from .ui import kpi_values

EMPTY_FIGURE = {"data": [], "layout": {"paper_bgcolor": "white", "plot_bgcolor": "white"}}


def filter_rows(rows: List[Dict[str, Any]], products: Optional[List[str]], regions: Optional[List[str]]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(rows or [])
    if df.empty:
        return df
    if products:
        df = df[df["product"].isin(products)]
    if regions:
        df = df[df["region"].isin(regions)]
    return df


def trend_figure(trend: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not trend:
        return EMPTY_FIGURE
    return {
        "data": [{
            "type": "scatter",
            "mode": "lines+markers",
            "x": [p["date"] for p in trend],
            "y": [p["profit"] for p in trend],
            "name": "Profit",
        }],
        "layout": {"title": "Profit Trend", "paper_bgcolor": "white", "plot_bgcolor": "white"},
    }


def register_callbacks(app, page: DashPage) -> None:

    @app.callback(
        Output("trend-graph", "figure"),
        Output("detail-table", "data"),
        Input(page.deferred_store_id, "data"),
        Input("product-dd", "value"),
        Input("region-dd", "value"),
    )
    def render_deferred(deferred, products, regions):
        """Deferred props arrive after the first render; filter them client-side."""
        deferred = deferred or {}
        rows = filter_rows(deferred.get("detail_rows", []), products, regions)
        return trend_figure(deferred.get("trend", [])), rows.to_dict(orient="records")

    @app.callback(
        Output("kpi-rev", "children"),
        Output("kpi-cost", "children"),
        Output("kpi-profit", "children"),
        Output("kpi-red", "children"),
        Output("generated-at", "children"),
        Input("refresh-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def refresh_kpis(n_clicks):
        """Partial reload: only the KPI props (and always-props) are resolved again."""
        props = page.partial(["kpis", "currency"])
        values = kpi_values(props.get("kpis") or {}, props.get("currency", "USD"))
        return values["rev"], values["cost"], values["profit"], values["red"], f"Generated at {props.get('generated_at')}"

    @app.callback(
        Output("download-data", "data"),
        Input("export-btn", "n_clicks"),
        State("product-dd", "value"),
        State("region-dd", "value"),
        prevent_initial_call=True,
    )
    def export_csv(n_clicks, products, regions):
        if not n_clicks:
            return no_update
        rows = page.partial(["export_rows"]).get("export_rows", [])
        csv = filter_rows(rows, products, regions).to_csv(index=False)
        return dict(content=csv, filename=f"dashboard_export_{dt.date.today().isoformat()}.csv")
