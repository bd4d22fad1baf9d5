"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

A middleware sits between the connection code and the router. It gets the
parsed request plus a callable for "everything after me":

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   HTTPRequest ──► mw[0] ──► mw[1] ──► ... ──► router.handle      │
    │                                                   │              │
    │   HTTPResponse ◄── mw[0] ◄── mw[1] ◄── ... ◄──────┘              │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Returning without calling next() short-circuits the chain. Middleware must
not add headers: the bytes a handler builds are the bytes the client gets.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Iterator, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """A step in the request chain. Subclasses implement __call__."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        ...

    @property
    def name(self) -> str:
        return type(self).__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware, folded around a final handler by wrap().

    Registration order is call order: the first middleware added sees the
    request first.
    """

    def __init__(self):
        self._chain: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._chain.append(middleware)
        logger.debug(f"Middleware registered: {middleware.name} (#{len(self._chain)})")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for item in middleware:
            self.add(item)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Return a handler that runs the whole chain, then `handler`."""
        wrapped = handler
        for middleware in self._chain[::-1]:
            wrapped = partial(middleware, next=wrapped)
        return wrapped

    def __len__(self) -> int:
        return len(self._chain)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._chain)
