from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from .file_def import FileDefinition
from .paths import build_path, build_url
from .routes import ServerRoute, json_route
from .types import DataType, resolve

# One capability method per data type, queried uniformly by get_capability()
CAPABILITIES: Mapping[str, str] = MappingProxyType(
    {
        DataType.CELLS: "get_cells",
        DataType.CELL_SETS: "get_cell_sets",
        DataType.EXPRESSION_MATRIX: "get_expression_matrix",
        DataType.MOLECULES: "get_molecules",
        DataType.NEIGHBORHOODS: "get_neighborhoods",
        DataType.RASTER: "get_raster",
        DataType.GENOMIC_PROFILES: "get_genomic_profiles",
    }
)


@dataclass(frozen=True)
class CapabilityResult:
    """
    Output of one capability call: the routes to register and the matching
    file definitions. Every locally served file definition's url points at
    one of `routes`.
    """

    routes: Tuple[ServerRoute, ...] = field(default_factory=tuple)
    file_defs: Tuple[FileDefinition, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "CapabilityResult":
        return cls()

    def is_empty(self) -> bool:
        return not self.routes and not self.file_defs


class AbstractWrapper(ABC):
    """
    Abstract base class for all data wrappers.

    Defines the contract that every wrapper must follow
    - expose an 'id' - used by the WrapperRegistry
    - implement 'can_wrap' - whether this wrapper understands a given object
    - override any subset of the capability methods (get_cells, get_cell_sets, ...)

    Capabilities not overridden return an empty CapabilityResult, so callers can
    query every wrapper for every data type without knowing its variant.
    Capability calls never register routes themselves; the caller does that.
    """

    id: str = None

    def __init__(self, obj: Any):
        self._obj = obj

    @property
    def obj(self) -> Any:
        """The wrapped object (shared, never copied or mutated)."""
        return self._obj

    @classmethod
    @abstractmethod
    def can_wrap(cls, obj: Any) -> bool:
        """
        Returns true if this wrapper class can wrap the given object
        """
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Capabilities (default: not implemented -> empty result)
    # ------------------------------------------------------------------
    def get_cells(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_cell_sets(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_expression_matrix(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_molecules(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_neighborhoods(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_raster(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    def get_genomic_profiles(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        return CapabilityResult.empty()

    # ------------------------------------------------------------------
    # Uniform probing
    # ------------------------------------------------------------------
    def get_capability(
        self, data_type: str, port: int, dataset_id: str, obj_i: int
    ) -> CapabilityResult:
        """
        Call the capability method for `data_type`.

        Raises:
            UnknownTypeError: if `data_type` is not in the catalog
        """
        data_type = resolve("data_type", data_type)
        method = getattr(self, CAPABILITIES[data_type])
        return method(port, dataset_id, obj_i)

    @classmethod
    def supported_data_types(cls) -> List[str]:
        """Data types whose capability method this class overrides."""
        return [
            data_type
            for data_type, method_name in CAPABILITIES.items()
            if getattr(cls, method_name) is not getattr(AbstractWrapper, method_name)
        ]

    # ------------------------------------------------------------------
    # Common helpers for all wrappers
    # ------------------------------------------------------------------
    @staticmethod
    def _json_capability(
        payload: Any,
        data_type: str,
        file_type: str,
        port: int,
        dataset_id: str,
        obj_i: int,
        suffix: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> CapabilityResult:
        """
        Build one route serving `payload` plus the file definition pointing at it.

        The suffix defaults to the data type, giving `/<dataset>/<i>/cells` etc.
        """
        suffix = suffix or resolve("data_type", data_type)
        route = json_route(build_path(dataset_id, obj_i, suffix), payload)
        file_def = FileDefinition(
            data_type=data_type,
            file_type=file_type,
            url=build_url(port, dataset_id, obj_i, suffix),
            options=options,
        )
        return CapabilityResult(routes=(route,), file_defs=(file_def,))


