from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import MissingRequiredFieldError
from .file_def import FileDefinition
from .routes import RouteTable
from .types import resolve
from .wrapper import CAPABILITIES, AbstractWrapper

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "1.0.4"


class ServedDataset:
    """
    A logical collection of wrapped objects sharing one dataset id.

    Each added wrapper gets the next object index (0, 1, 2, ...), which keeps
    routes of several objects in the same dataset apart.
    """

    def __init__(self, dataset_id: str, name: Optional[str] = None):
        if not dataset_id:
            raise ValueError("dataset_id must be a non-empty string")
        self.dataset_id = dataset_id
        self.name = name or dataset_id
        self._objects: List[AbstractWrapper] = []
        # set while the owning session is set up; routes are only built in setup()
        self.sealed = False

    def add_object(self, wrapper: AbstractWrapper) -> int:
        """
        Add a wrapper to this dataset.
        :return: the object index assigned to it
        :raises RuntimeError: if the owning session is already set up
        """
        if self.sealed:
            raise RuntimeError(
                f"Cannot add objects to dataset '{self.dataset_id}' after setup(); call teardown() first"
            )
        if not isinstance(wrapper, AbstractWrapper):
            raise TypeError(f"Expected an AbstractWrapper, got {type(wrapper).__name__}")
        self._objects.append(wrapper)
        return len(self._objects) - 1

    @property
    def objects(self) -> List[AbstractWrapper]:
        return list(self._objects)


class ServingSession:
    """
    Owns the datasets, the route table and the file definitions of one serving
    session.

    Lifecycle:
    - add_dataset() / ServedDataset.add_object() during startup
    - setup(port) queries every capability of every object once and registers
      the resulting routes; the table is frozen afterwards
    - dispatch() / manifest() while serving
    - teardown() drops routes and file definitions together
    """

    def __init__(self, name: str = "", description: str = ""):
        self.name = name
        self.description = description
        self._datasets: Dict[str, ServedDataset] = {}
        self._route_table = RouteTable()
        self._file_defs: Dict[str, List[FileDefinition]] = {}
        self._port: Optional[int] = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add_dataset(self, dataset_id: str, name: Optional[str] = None) -> ServedDataset:
        """
        :raises ValueError: if a dataset with the same id already exists
        """
        if dataset_id in self._datasets:
            raise ValueError(f"Dataset '{dataset_id}' already registered")
        if self.is_set_up:
            raise RuntimeError("Cannot add datasets after setup(); call teardown() first")

        dataset = ServedDataset(dataset_id, name)
        self._datasets[dataset_id] = dataset
        return dataset

    @property
    def datasets(self) -> List[ServedDataset]:
        return list(self._datasets.values())

    # ------------------------------------------------------------------
    # Setup / teardown
    # ------------------------------------------------------------------
    @property
    def is_set_up(self) -> bool:
        return self._port is not None

    @property
    def port(self) -> Optional[int]:
        return self._port

    def setup(self, port: int, data_types: Optional[Iterable[str]] = None) -> None:
        """
        Query every wrapper for every capability and register the routes.

        A capability failing with MissingRequiredFieldError is logged and
        skipped; the other capabilities and wrappers carry on. Route collisions
        and unknown types abort setup.

        :param port: port the server will listen on (needed for absolute URLs)
        :param data_types: restrict probing to these data types (default: all)
        :raises DuplicatePathError: if two routes share a path
        :raises UnknownTypeError: if a requested data type is not in the catalog
        """
        if self.is_set_up:
            raise RuntimeError("Session already set up; call teardown() first")

        if data_types is None:
            requested = list(CAPABILITIES)
        else:
            requested = [resolve("data_type", dt) for dt in data_types]

        logger.info(
            "Setting up serving session",
            extra={"port": port, "n_datasets": len(self._datasets), "data_types": requested},
        )

        # Build into fresh containers so a failed setup leaves nothing behind
        route_table = RouteTable()
        file_defs_by_dataset: Dict[str, List[FileDefinition]] = {}

        for dataset in self._datasets.values():
            file_defs: List[FileDefinition] = []
            for obj_i, wrapper in enumerate(dataset.objects):
                for data_type in requested:
                    try:
                        result = wrapper.get_capability(data_type, port, dataset.dataset_id, obj_i)
                    except MissingRequiredFieldError as e:
                        logger.error(
                            "Capability skipped: required data missing",
                            extra={
                                "dataset": dataset.dataset_id,
                                "obj_i": obj_i,
                                "wrapper": wrapper.id,
                                "data_type": data_type,
                                "error": str(e),
                            },
                        )
                        continue

                    route_table.register_all(result.routes)
                    file_defs.extend(result.file_defs)

            file_defs_by_dataset[dataset.dataset_id] = file_defs

        route_table.freeze()
        self._route_table = route_table
        self._file_defs = file_defs_by_dataset
        self._port = port
        for dataset in self._datasets.values():
            dataset.sealed = True

        logger.info(
            "Serving session ready",
            extra={"port": port, "n_routes": len(self._route_table)},
        )

    def teardown(self) -> None:
        """Discard all routes and file definitions; datasets stay registered."""
        self._route_table = RouteTable()
        self._file_defs = {}
        self._port = None
        for dataset in self._datasets.values():
            dataset.sealed = False

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------
    @property
    def route_table(self) -> RouteTable:
        return self._route_table

    def file_defs(self, dataset_id: str) -> List[FileDefinition]:
        if dataset_id not in self._datasets:
            raise KeyError(f"Unknown dataset '{dataset_id}'")
        return list(self._file_defs.get(dataset_id, []))

    def dispatch(self, path: str) -> Any:
        """
        :raises RouteNotFoundError: if nothing is registered under `path`
        """
        return self._route_table.dispatch(path)

    def manifest(self) -> Dict[str, Any]:
        """Dataset manifest handed to the visualization client."""
        return {
            "version": MANIFEST_VERSION,
            "name": self.name,
            "description": self.description,
            "datasets": [
                {
                    "uid": dataset.dataset_id,
                    "name": dataset.name,
                    "files": [fd.to_dict() for fd in self._file_defs.get(dataset.dataset_id, [])],
                }
                for dataset in self._datasets.values()
            ],
        }
