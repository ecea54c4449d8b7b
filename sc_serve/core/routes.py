from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping

from .exceptions import DuplicatePathError, RouteNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerRoute:
    """
    Binding of a path to a deferred response producer.

    `responder` takes no arguments and returns the response payload
    (usually a JsonObject built by a wrapper capability).
    """

    path: str
    responder: Callable[[], Any]


def json_route(path: str, payload: Any) -> ServerRoute:
    """Route serving an already-built payload."""
    return ServerRoute(path=path, responder=lambda: payload)


class RouteTable:
    """
    Append-only collection of routes for one serving session.

    Design Notes:
    - Enforces path uniqueness: a second registration of the same path raises
      DuplicatePathError instead of silently shadowing the first
    - No update/delete; wrappers are registered once during setup
    - `freeze()` swaps the backing dict for a read-only snapshot, after which
      concurrent dispatch from server threads is only ever a read
    """

    def __init__(self) -> None:
        self._routes: Dict[str, ServerRoute] | Mapping[str, ServerRoute] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, route: ServerRoute) -> None:
        """
        Register a route.

        Raises:
            DuplicatePathError: if a route with the same path already exists
            RuntimeError: if the table has been frozen
        """
        if self._frozen:
            raise RuntimeError(f"Route table is frozen; cannot register '{route.path}'")

        if route.path in self._routes:
            raise DuplicatePathError(f"Route '{route.path}' already registered")

        self._routes[route.path] = route
        logger.debug("Registered route", extra={"path": route.path})

    def register_all(self, routes: Iterable[ServerRoute]) -> None:
        for route in routes:
            self.register(route)

    def dispatch(self, path: str) -> Any:
        """
        Look up the route for `path` and invoke its responder.

        Raises:
            RouteNotFoundError: if no route is registered for `path`
        """
        try:
            route = self._routes[path]
        except KeyError:
            raise RouteNotFoundError(f"No route registered for '{path}'") from None
        return route.responder()

    def freeze(self) -> None:
        """Make the table read-only. Idempotent."""
        if not self._frozen:
            self._routes = MappingProxyType(dict(self._routes))
            self._frozen = True

    def paths(self) -> List[str]:
        """Registered paths in registration order."""
        return list(self._routes)

    def __contains__(self, path: object) -> bool:
        return path in self._routes

    def __len__(self) -> int:
        return len(self._routes)
