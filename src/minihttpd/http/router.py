"""
=============================================================================
URL ROUTER
=============================================================================

Maps a request path to a handler function. Two kinds of rule exist:

- Exact paths:   "/", "/user-agent"
- Path prefixes: "/echo", "/files" (matches "/echo/abc", "/files/a.txt")

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /echo/abc                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER (checked top to bottom, first match wins)           │   │
    │   │                                                              │   │
    │   │   ==   /            → index                                  │   │
    │   │   ^=   /echo        → echo          ← MATCH!                 │   │
    │   │   ^=   /files       → files                                  │   │
    │   │   ==   /user-agent  → user_agent                             │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request) → HTTPResponse                                       │
    │                                                                      │
    │   No rule matched → 404 Not Found                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Prefix rules are plain string prefixes: "/echo" also matches "/echoes".
The handler is responsible for stripping whatever it considers its prefix.
Methods are not part of routing; handlers that care look at request.method.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


# Handler: takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered routing rule.

        Route(path="/echo", handler=echo, prefix=True, name="echo")
    """

    path: str                        # Exact path or prefix
    handler: Handler                 # Handler function to call
    prefix: bool = False             # True: startswith match, False: equality
    name: Optional[str] = None       # Label for logs and debugging

    def matches(self, path: str) -> bool:
        """Check whether this rule applies to a request path."""
        if self.prefix:
            return path.startswith(self.path)
        return path == self.path


class Router:
    """
    Ordered list of routes with a 404 fallback.

        router = Router()

        @router.route("/")
        def index(request):
            return ok()

        @router.route("/echo", prefix=True)
        def echo(request):
            ...

    Order matters: register more specific rules first.
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(
        self,
        path: str,
        handler: Handler,
        prefix: bool = False,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route at the end of the list.

        Args:
            path: Exact path, or a prefix when prefix=True
            handler: Function that takes a request and returns a response
            prefix: Match with str.startswith instead of equality
            name: Optional label (defaults to the handler's __name__)

        Returns:
            The registered Route object
        """
        route = Route(
            path=path,
            handler=handler,
            prefix=prefix,
            name=name or getattr(handler, "__name__", None),
        )
        self._routes.append(route)
        return route

    def route(
        self,
        path: str,
        prefix: bool = False,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Usage:
            @router.route("/files", prefix=True)
            def files(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, prefix, name)
            return handler  # Unchanged, so decorators can be stacked
        return decorator

    def match(self, path: str) -> Optional[Route]:
        """
        Find the first route that applies to a path.

        Returns:
            The matching Route, or None
        """
        for route in self._routes:
            if route.matches(path):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Returns:
            The handler's response, or a bodyless 404 if nothing matched
        """
        route = self.match(request.path)
        if route is None:
            return not_found()
        return route.handler(request)

    @property
    def routes(self) -> List[Route]:
        """All registered routes, in matching order."""
        return list(self._routes)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)
