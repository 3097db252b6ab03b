"""LinksModule - URL builders for files and list items of the primary web.

    await manager.add_module(LinksModule())
    links = ctx.extension("links")
    links.file.edit("/Shared Documents/plan.docx")
    links.list_item.view("/Lists/Tasks", 42)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

# Characters encodeURIComponent-style escaping leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _join(web_url: str, path: str) -> str:
    clean = path if path.startswith("/") else f"/{path}"
    return f"{web_url.rstrip('/')}{clean}"


@dataclass(frozen=True)
class FileLinks:
    web_url: str

    def view(self, path: str) -> str:
        return _join(self.web_url, path)

    def edit(self, path: str) -> str:
        """Office Online editor URL for the document at `path`."""
        source = quote(_join(self.web_url, path), safe=_URI_COMPONENT_SAFE)
        return f"{self.web_url.rstrip('/')}/_layouts/15/WopiFrame.aspx?sourcedoc={source}&action=edit"

    def download(self, path: str) -> str:
        return f"{_join(self.web_url, path)}?download=1"


@dataclass(frozen=True)
class ListItemLinks:
    web_url: str

    def view(self, list_url: str, item_id: int) -> str:
        return self._form(list_url, "DispForm.aspx", item_id)

    def edit(self, list_url: str, item_id: int) -> str:
        return self._form(list_url, "EditForm.aspx", item_id)

    def new_item(self, list_url: str) -> str:
        return self._form(list_url, "NewForm.aspx", None)

    def _form(self, list_url: str, form: str, item_id: Optional[int]) -> str:
        base = f"{_join(self.web_url, list_url).rstrip('/')}/{form}"
        return f"{base}?ID={item_id}" if item_id else base


@dataclass(frozen=True)
class LinkBuilder:
    file: FileLinks
    list_item: ListItemLinks


class LinksModule:
    """Context module exposing a LinkBuilder bound to the primary web URL."""

    name = "links"

    def initialize(self, context: Any, config: Mapping[str, Any]) -> LinkBuilder:
        web_url = config.get("web_url") or context.site_url
        return LinkBuilder(file=FileLinks(web_url), list_item=ListItemLinks(web_url))


__all__ = [
    "LinksModule",
    "LinkBuilder",
    "FileLinks",
    "ListItemLinks",
]
