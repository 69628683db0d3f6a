"""Request interception gate.

Every request of a session's page passes through a ``RequestGate``. The
gate asks a pluggable filter whether to let the request through; the
default filter allows everything, so pages behave exactly as if nothing
were intercepting. Swap the filter to block trackers, media, etc.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Union

if TYPE_CHECKING:
    from playwright.async_api import Page, Request, Route

logger = logging.getLogger(__name__)

RequestFilter = Callable[["Request"], Union[bool, Awaitable[bool]]]

_ROUTE_PATTERN = "**/*"


def allow_all(request: Request) -> bool:
    """Pass-through filter: every request is allowed unmodified."""
    return True


def block_resource_types(*resource_types: str) -> RequestFilter:
    """Build a filter that aborts requests of the given Playwright resource types.

    Example::

        gate = RequestGate(block_resource_types("image", "media", "font"))
    """
    blocked = frozenset(resource_types)

    def _filter(request: Request) -> bool:
        return request.resource_type not in blocked

    return _filter


class RequestGate:
    """Routes a page's requests through a filter.

    Args:
        request_filter: Called with each ``Request``; may be sync or async.
            Truthy continues the request, falsy aborts it.
    """

    def __init__(self, request_filter: RequestFilter | None = None) -> None:
        self.request_filter: RequestFilter = request_filter or allow_all
        self.blocked = 0

    async def attach(self, page: Page) -> None:
        """Start intercepting every request made by *page*."""
        await page.route(_ROUTE_PATTERN, self.handle)
        logger.debug("Request gate attached (filter=%s)", getattr(self.request_filter, "__name__", "custom"))

    async def handle(self, route: Route) -> None:
        """Continue or abort a single intercepted request."""
        request = route.request
        allowed = self.request_filter(request)
        if inspect.isawaitable(allowed):
            allowed = await allowed
        if allowed:
            await route.continue_()
            return
        self.blocked += 1
        logger.debug("Blocked %s %s", request.method, request.url)
        await route.abort("blockedbyclient")
