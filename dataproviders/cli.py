import keyword
import logging
from pathlib import Path
from typing import Optional

import click
from jinja2 import BaseLoader, Environment

from .config import get_settings
from .errors import ScaffoldError
from .formatters import SnakeCase

logger = logging.getLogger(__name__)

PROVIDER_TEMPLATE = '''"""{{ class_name }} page data."""
from dataproviders import DataProvider


class {{ class_name }}(DataProvider):

    def __init__(self):
        self.static_data = {}
'''

_env = Environment(loader=BaseLoader(), keep_trailing_newline=True, autoescape=False)


def render_provider(class_name: str) -> str:
    return _env.from_string(PROVIDER_TEMPLATE).render(class_name=class_name)


def scaffold(class_name: str, directory: Path, force: bool = False) -> Path:
    """Write a new provider module named after ``class_name`` into ``directory``."""
    if not class_name.isidentifier() or keyword.iskeyword(class_name) or not class_name[0].isupper():
        raise ScaffoldError(f"'{class_name}' is not a valid provider class name")

    target = Path(directory) / f"{SnakeCase().format(class_name)}.py"
    if target.exists() and not force:
        raise ScaffoldError(f"{target} already exists (use --force to overwrite)")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_provider(class_name), encoding="utf-8")
    logger.info("Created data provider %s at %s", class_name, target)
    return target


@click.command("make-data-provider")
@click.argument("name")
@click.option(
    "--path",
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target directory (defaults to the DATAPROVIDERS_PATH setting)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def make_data_provider(name: str, path: Optional[Path], force: bool) -> None:
    """Create a new data provider class."""
    directory = path or Path(get_settings().providers_path)
    try:
        target = scaffold(name, directory, force=force)
    except ScaffoldError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Data provider created: {target}")
