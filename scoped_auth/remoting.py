"""
Remote method declarations.

Every guarded HTTP operation is declared here once, at application startup,
together with the access scopes a caller's token must match. The registry is
frozen before the application starts serving requests.
"""
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from scoped_auth.services.scopes import normalize_scopes


class RemoteMethodError(Exception):
    """Raised on invalid remote method registration or lookup."""

    pass


@dataclass(frozen=True)
class RemoteMethod:
    """Descriptor of a named operation invokable over HTTP."""

    name: str
    verb: str
    path: str
    access_scopes: frozenset[str]


class RemoteMethodRegistry:
    def __init__(self):
        self._methods: dict[str, RemoteMethod] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        *,
        verb: str,
        path: str,
        access_scopes: Iterable[str] | None = None,
    ) -> RemoteMethod:
        """
        Declare a remote method.

        Args:
            name: Method name used by route guards (e.g. "findById")
            verb: HTTP verb
            path: Route path
            access_scopes: Scopes of which the caller needs at least one,
                defaults to DEFAULT

        Raises:
            RemoteMethodError: If the registry is frozen or the name is taken
        """
        if self._frozen:
            raise RemoteMethodError(
                f"Cannot register '{name}': remote methods are frozen"
            )
        if name in self._methods:
            raise RemoteMethodError(f"Remote method already registered: {name}")

        method = RemoteMethod(
            name=name,
            verb=verb.upper(),
            path=path,
            access_scopes=normalize_scopes(access_scopes),
        )
        self._methods[name] = method
        return method

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> RemoteMethod:
        try:
            return self._methods[name]
        except KeyError:
            raise RemoteMethodError(f"Unknown remote method: {name}") from None

    def __iter__(self) -> Iterator[RemoteMethod]:
        return iter(self._methods.values())


def verify_routes(registry: RemoteMethodRegistry, routes: Iterable[object]) -> None:
    """
    Check that every declared method is served by a route with its verb and path.

    Args:
        registry: Declared remote methods
        routes: Application routes, e.g. ``app.routes``

    Raises:
        RemoteMethodError: If a descriptor has no matching route
    """
    served = {
        (verb, route.path)
        for route in routes
        for verb in (getattr(route, "methods", None) or ())
    }
    for method in registry:
        if (method.verb, method.path) not in served:
            raise RemoteMethodError(
                f"Remote method '{method.name}' has no route for {method.verb} {method.path}"
            )
