import datetime as dt
import logging
from typing import Optional

from dash import Dash
from flask import Flask

from dataproviders import Container, DataProviders, get_container

from .config import DemoSettings, get_settings
from .providers import dashboard_props


class ServerFactory:
    """Class-based factory for the Flask server and the Dash app."""

    def __init__(self, settings: Optional[DemoSettings] = None, container: Optional[Container] = None) -> None:
        self.settings = settings or get_settings()
        self.container = container or get_container()

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.settings.log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    def create_server(self) -> Flask:
        self.configure_logging()
        server = Flask(__name__)
        DataProviders(server, container=self.container)

        @server.route("/health")
        def health():
            return {"status": "ok", "time": dt.datetime.now(dt.timezone.utc).isoformat()}

        @server.route("/api/dashboard")
        def dashboard_api():
            # Nested payload; deferred props are resolved by the app's JSON provider.
            return self.container.call(dashboard_props).to_nested_map(formatter="SnakeCase")

        return server

    def create_app(self, server: Flask) -> Dash:
        app = Dash(
            __name__,
            server=server,
            suppress_callback_exceptions=True,
            title=self.settings.app_title,
        )
        app._favicon = None
        return app
