from typing import Optional

from flask import Flask

from .cli import make_data_provider
from .container import Container, get_container
from .rendering.bridge import ProviderJSONProvider


class DataProviders:
    """Flask extension wiring the container, JSON provider and CLI into an app."""

    def __init__(self, app: Optional[Flask] = None, container: Optional[Container] = None) -> None:
        self.container = container or get_container()
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Expose the container to composition and teach ``app.json`` about providers."""
        app.extensions["dataproviders"] = self.container
        app.json = ProviderJSONProvider(app)
        app.cli.add_command(make_data_provider)
