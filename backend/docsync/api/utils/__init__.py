from .helper import describe_requested_source, get_page_or_404, not_synced_page

__all__ = [
    "describe_requested_source",
    "get_page_or_404",
    "not_synced_page",
]
