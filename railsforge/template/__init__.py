"""railsforge template module -- template source resolution and text rendering."""

from .renderer import TextRenderer
from .resolver import SourceError, SourceKind, TemplateSource, resolve_source

__all__ = [
    "SourceError",
    "SourceKind",
    "TemplateSource",
    "TextRenderer",
    "resolve_source",
]
