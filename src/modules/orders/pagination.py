"""Offset pagination arithmetic for order listings.

Pages are 1-indexed windows of ``limit`` records.  ``last_page`` is
``ceil(total / limit)``, so an empty result set has ``last_page == 0``
and is a valid (empty) page rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass

from modules.orders.exceptions import OrderValidationError, PageOutOfRange


@dataclass(frozen=True)
class PageWindow:
    total: int
    page: int
    limit: int
    last_page: int
    offset: int

    @property
    def is_empty(self) -> bool:
        return self.last_page == 0


def paginate(total: int, limit: int, page: int) -> PageWindow:
    """Derive the window for *page* over *total* records.

    Raises:
        OrderValidationError: negative total, non-positive limit or page.
        PageOutOfRange: *page* lies beyond a non-zero last page.
    """
    if total < 0:
        raise OrderValidationError("Total must not be negative.")
    if limit < 1:
        raise OrderValidationError("Limit must be at least 1.")
    if page < 1:
        raise OrderValidationError("Page must be at least 1.")

    last_page = -(-total // limit)
    if last_page == 0:
        return PageWindow(total=0, page=page, limit=limit, last_page=0, offset=0)
    if page > last_page:
        raise PageOutOfRange(requested_page=page, last_page=last_page)
    return PageWindow(
        total=total,
        page=page,
        limit=limit,
        last_page=last_page,
        offset=(page - 1) * limit,
    )
