"""Page data for the example dashboard, one provider per page section."""
import datetime as dt
from typing import Any, Dict, List, Optional

from dataproviders import DataProvider, ProviderCollection, always, defer, internal, lazy

from .config import DemoSettings
from .datasource import MetricsRepository


class HeaderProvider(DataProvider):
    def __init__(self, title: str, team: Optional[str] = None) -> None:
        self.title = title
        self.subtitle = f"Team: {team}" if team else "All teams"

    def generated_at(self):
        return always(lambda: dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"))


class FilterOptionsProvider(DataProvider):
    """Dropdown options, derived from the same facts the page shows."""

    def products(self, repo: MetricsRepository) -> List[str]:
        return repo.options("product")

    def regions(self, repo: MetricsRepository) -> List[str]:
        return repo.options("region")


class MetricsProvider(DataProvider):
    static_data = {"currency": "USD"}

    def __init__(self, team: Optional[str] = None) -> None:
        self.team = team

    def kpis(self, repo: MetricsRepository) -> Dict[str, Any]:
        return repo.kpis(self.team)

    def filters(self) -> FilterOptionsProvider:
        return FilterOptionsProvider()

    def trend(self, repo: MetricsRepository):
        return defer(lambda: repo.trend(self.team))

    def detail_rows(self, repo: MetricsRepository):
        return defer(lambda: repo.rows(self.team), group="table")

    def export_rows(self, repo: MetricsRepository):
        return lazy(lambda: repo.rows(self.team))

    @internal
    def describe(self) -> str:
        return f"MetricsProvider(team={self.team!r})"


def dashboard_props(settings: DemoSettings) -> ProviderCollection:
    """Props of the dashboard page; rebuilt for every load and partial reload."""
    return (
        ProviderCollection.collection(HeaderProvider(settings.app_title, settings.default_team))
        .add(MetricsProvider(team=settings.default_team))
        .when(settings.debug, lambda c: c.add({"debug": {"max_rows": settings.max_rows}}))
    )
