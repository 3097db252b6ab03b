"""Optional context modules registered with ContextManager.add_module()."""

from portal_context.modules.links import FileLinks, LinkBuilder, LinksModule, ListItemLinks

__all__ = [
    "LinksModule",
    "LinkBuilder",
    "FileLinks",
    "ListItemLinks",
]
