class ScServeError(Exception):
    """Base exception for all sc_serve errors"""
    pass


class ConfigError(ScServeError):
    """Invalid or inconsistent global.json / dataset config"""
    pass


class UnknownTypeError(ScServeError, KeyError):
    """
    A data type or file type identifier is not in the fixed catalog.
    Programmer error, surfaced at setup time.
    """

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class TypeMismatchError(ScServeError, ValueError):
    """Both tags are in the catalog, but the file type does not encode the data type"""
    pass


class DuplicatePathError(ScServeError, ValueError):
    """Two routes were registered under the same path"""
    pass


class RouteNotFoundError(ScServeError, KeyError):
    """No route is registered for the requested path"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MissingRequiredFieldError(ScServeError):
    """
    The wrapped object lacks data a capability cannot work without
    (e.g. the configured cell id column or a named embedding).
    Fatal for that capability call only.
    """
    pass
