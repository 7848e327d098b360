"""Rendering layer: prop wrappers, props hand-off and the Dash page host.

Import from the submodules (``props``, ``bridge``, ``dash_page``) or from the
top-level ``dataproviders`` package.
"""
