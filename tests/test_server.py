from dataproviders import Container
from dataproviders_demo.config import get_settings
from dataproviders_demo.server import ServerFactory


def test_health_endpoint(flask_client):
    rv = flask_client.get("/health")
    assert rv.status_code == 200
    js = rv.get_json()
    assert js["status"] == "ok"
    assert "time" in js


def test_dashboard_api_returns_nested_snake_case_payload(flask_client):
    rv = flask_client.get("/api/dashboard")
    assert rv.status_code == 200
    js = rv.get_json()
    assert js["title"] == get_settings().app_title
    assert js["currency"] == "USD"
    assert set(js["kpis"]) == {"revenue", "cost", "profit", "red_systems"}
    assert js["filters"]["products"] == ["Alpha", "Beta", "Delta", "Gamma"]
    # deferred and lazy props are resolved when the payload is serialized
    assert isinstance(js["trend"], list) and js["trend"]
    assert len(js["export_rows"]) == get_settings().max_rows
    assert "generated_at" in js
    assert "describe" not in js


def test_server_factory_title_and_extension():
    settings = get_settings()
    container = Container()
    factory = ServerFactory(settings, container)
    server = factory.create_server()
    app = factory.create_app(server)
    # Dash app title comes from settings
    assert app.title == settings.app_title
    assert server.extensions["dataproviders"] is container
    assert "make-data-provider" in server.cli.commands
