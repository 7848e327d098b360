import logging
from typing import Any, Callable, Collection, Dict, Optional

from dash import Dash, Input, Output, dcc, html, no_update

from ..container import current_container
from ..formatters import FormatterLike
from .bridge import Page, PropsResolver, request_path, to_props

logger = logging.getLogger(__name__)


class DashPage:
    """Serves a Dash layout from composed props and loads deferred props after render.

    ``props_factory`` builds the page data (a provider, collection or mapping) and
    runs again for every deferred load or partial reload, the same way a page
    controller would. Its parameters are injected from the container.
    ``layout`` receives the full-load props and returns the page component tree.
    ``formatter`` pins the key naming the layout relies on.
    """

    def __init__(
        self,
        page_id: str,
        props_factory: Callable[..., Any],
        layout: Callable[[Dict[str, Any]], Any],
        nested: bool = False,
        formatter: FormatterLike = None,
    ) -> None:
        self.page_id = page_id
        self.props_factory = props_factory
        self.layout = layout
        self.nested = nested
        self.formatter = formatter

    @property
    def store_id(self) -> str:
        return f"{self.page_id}-page"

    @property
    def deferred_store_id(self) -> str:
        return f"{self.page_id}-deferred"

    # ---- Props ----
    def props(self) -> Dict[str, Any]:
        data = current_container().call(self.props_factory)
        return to_props(data, nested=self.nested, formatter=self.formatter)

    def page(self, only: Optional[Collection[str]] = None, except_: Optional[Collection[str]] = None) -> Page:
        props, deferred = PropsResolver(formatter=self.formatter).resolve(self.props(), only=only, except_=except_)
        return Page(component=self.page_id, props=props, url=request_path(), deferred_props=deferred)

    def partial(self, only: Collection[str]) -> Dict[str, Any]:
        """Props for a partial reload of ``only`` (plus always-props)."""
        return self.page(only=list(only)).props

    def load_deferred(self, page_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        groups = (page_data or {}).get("deferredProps") or {}
        keys = [key for group in groups.values() for key in group]
        if not keys:
            return {}
        logger.debug("Loading deferred props for %s: %s", self.page_id, keys)
        return self.partial(keys)

    # ---- Dash wiring ----
    def serve(self):
        page = self.page()
        return html.Div(
            id=self.page_id,
            children=[
                dcc.Store(id=self.store_id, data=page.model_dump(by_alias=True)),
                dcc.Store(id=self.deferred_store_id),
                self.layout(page.props),
            ],
        )

    def register(self, app: Dash) -> None:
        """Register the callback that fetches deferred props once the page has rendered."""

        @app.callback(
            Output(self.deferred_store_id, "data"),
            Input(self.store_id, "data"),
            prevent_initial_call=False,
        )
        def load_deferred(page_data):
            if not (page_data or {}).get("deferredProps"):
                return no_update
            return self.load_deferred(page_data)
