"""
Core layer: type catalogs, path/URL scheme, JSON encoding policy, route table,
the wrapper contract and the serving session
"""

from .exceptions import (
    ScServeError,
    UnknownTypeError,
    TypeMismatchError,
    DuplicatePathError,
    RouteNotFoundError,
    MissingRequiredFieldError,
)
from .file_def import FileDefinition
from .json_policy import JsonArray, JsonObject, json_array, json_object
from .paths import build_path, build_url
from .routes import RouteTable, ServerRoute
from .session import ServedDataset, ServingSession
from .types import DataType, FileType, resolve
from .wrapper import AbstractWrapper, CapabilityResult
from .wrapper_registry import WrapperRegistry, create_default_registry

__all__ = [
    "ScServeError",
    "UnknownTypeError",
    "TypeMismatchError",
    "DuplicatePathError",
    "RouteNotFoundError",
    "MissingRequiredFieldError",
    "FileDefinition",
    "JsonArray",
    "JsonObject",
    "json_array",
    "json_object",
    "build_path",
    "build_url",
    "RouteTable",
    "ServerRoute",
    "ServedDataset",
    "ServingSession",
    "DataType",
    "FileType",
    "resolve",
    "AbstractWrapper",
    "CapabilityResult",
    "WrapperRegistry",
    "create_default_registry",
]
