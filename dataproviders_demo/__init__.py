from dataproviders import DashPage, get_container

from .config import DemoSettings, get_settings
from .datasource import MetricsRepository
from .providers import dashboard_props
from .server import ServerFactory
from .ui import build_layout
from .callbacks import register_callbacks

# Services
settings = get_settings()
container = get_container()
container.instance(DemoSettings, settings)
container.singleton(MetricsRepository)

# Assemble
factory = ServerFactory(settings, container)
server = factory.create_server()
app = factory.create_app(server)

# Pages
page = DashPage("dashboard", dashboard_props, build_layout, formatter="SnakeCase")
app.layout = page.serve
page.register(app)
register_callbacks(app, page)

__all__ = ["app", "server", "page"]
