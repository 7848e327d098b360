from dash.development.base_component import Component

from dataproviders_demo.callbacks import filter_rows, trend_figure
from dataproviders_demo.config import get_settings
from dataproviders_demo.datasource import COLUMNS, MetricsRepository
from dataproviders_demo.providers import MetricsProvider, dashboard_props
from dataproviders_demo.ui import build_layout, format_amount, kpi_values


def make_rows():
    return [
        {"date": "2025-01-01", "product": "A", "region": "EMEA", "profit": 40.0},
        {"date": "2025-01-02", "product": "B", "region": "APAC", "profit": -30.0},
        {"date": "2025-01-03", "product": "A", "region": "APAC", "profit": 50.0},
    ]


def test_repository_frame_shape_and_team_filter():
    repo = MetricsRepository(get_settings())
    df = repo.frame()
    assert list(df.columns) == COLUMNS
    assert len(df) == get_settings().max_rows
    assert set(repo.frame("Data")["team"]) == {"Data"}


def test_repository_kpis_are_consistent():
    repo = MetricsRepository(get_settings())
    kpis = repo.kpis()
    assert round(kpis["revenue"] - kpis["cost"], 2) == round(kpis["profit"], 2)
    assert kpis["red_systems"] >= 0


def test_metrics_provider_members():
    names = [m.name for m in MetricsProvider().members()]
    assert names == ["team", "kpis", "filters", "trend", "detail_rows", "export_rows", "currency"]


def test_dashboard_props_debug_entry(container):
    settings = get_settings().model_copy(update={"debug": True})
    container.instance(MetricsRepository, MetricsRepository(settings))
    data = dashboard_props(settings).to_flat_map(resolver=container)
    assert data["debug"] == {"max_rows": settings.max_rows}
    assert "debug" not in dashboard_props(get_settings()).to_flat_map(resolver=container)


def test_format_amount_and_kpi_values():
    assert format_amount(999) == "999"
    assert format_amount(12_500) == "12K"
    assert format_amount(7_200_000) == "7M"
    assert kpi_values({})["rev"] == "—"
    values = kpi_values({"revenue": 2000, "cost": 1000, "profit": 1000, "red_systems": 2}, "EUR")
    assert values["rev"] == "2K EUR"
    assert values["red"] == "2"


def test_build_layout_returns_component():
    layout = build_layout({
        "title": "T",
        "subtitle": "S",
        "kpis": {"revenue": 1, "cost": 1, "profit": 0, "red_systems": 0},
        "filters": {"products": ["A"], "regions": ["EMEA"]},
    })
    assert isinstance(layout, Component)
    # Ensure key IDs exist in the tree by stringifying
    s = str(layout)
    for component_id in ("product-dd", "region-dd", "refresh-btn", "export-btn", "trend-graph", "detail-table"):
        assert component_id in s


def test_served_page_embeds_props_store(dash_app_and_server):
    from dataproviders_demo import page

    _, server = dash_app_and_server
    with server.test_request_context("/"):
        tree = page.serve()
    store = tree.children[0]
    assert store.id == "dashboard-page"
    assert store.data["deferredProps"] == {"default": ["trend"], "table": ["detail_rows"]}
    assert "export_rows" not in store.data["props"]


def test_filter_rows_by_product_and_region():
    out = filter_rows(make_rows(), ["A"], ["APAC"])
    assert len(out) == 1
    assert out.iloc[0]["profit"] == 50.0
    assert len(filter_rows(make_rows(), None, None)) == 3
    assert filter_rows([], ["A"], None).empty


def test_trend_figure():
    assert trend_figure([])["data"] == []
    fig = trend_figure([{"date": "2025-01-01", "profit": 1.0}])
    assert fig["data"][0]["x"] == ["2025-01-01"]
