from __future__ import annotations

from typing import Any, Dict

from .repositories import Page


# PUBLIC_INTERFACE
def page_envelope(page: Page) -> Dict[str, Any]:
    """
    Build the standard envelope for paginated list endpoints.

    Args:
        page: The store page to describe.

    Returns:
        Dict with keys: content, page, size, total_elements, total_pages, first, last.
    """
    return {
        "content": list(page.items),
        "page": page.page,
        "size": page.size,
        "total_elements": int(page.total_elements),
        "total_pages": page.total_pages,
        "first": page.first,
        "last": page.last,
    }
