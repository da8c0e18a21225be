"""Template Files — loads template text for TemplateEncoder from a directory.

Invariants:
    - Include names resolve relative to the directory of the root template
    - A name that resolves outside that directory is a TemplateError, as is an
      unreadable file
    - Files are read as UTF-8
"""

from pathlib import Path

from httprpc.core.domain_types import TEXT_MIME_TYPE
from httprpc.core.errors import TemplateError
from httprpc.core.localization import TextBundle
from httprpc.core.template import TemplateEncoder


class DirectoryTemplateLoader:
    """Reads named templates from one directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).resolve()

    def load(self, name: str) -> str:
        path = (self.directory / name).resolve()
        if not path.is_relative_to(self.directory):
            raise TemplateError(f"Template '{name}' is outside {self.directory}.", name)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Cannot read template '{name}'.", name) from e


def load_template_encoder(
    path: str | Path,
    content_type: str = TEXT_MIME_TYPE,
    bundle: TextBundle | None = None,
    locale: str = "en",
) -> TemplateEncoder:
    """TemplateEncoder for the template file at `path`; includes load beside it."""
    path = Path(path)
    return TemplateEncoder(
        path.name, DirectoryTemplateLoader(path.parent), content_type, bundle, locale,
    )
