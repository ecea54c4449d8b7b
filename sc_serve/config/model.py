from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from sc_serve.core.exceptions import ConfigError

DEFAULT_PORT = 8000

# Keys of an object entry that are not passed on to the wrapper constructor
_OBJECT_RESERVED_KEYS = {"path", "file", "wrapper"}


@dataclass
class ObjectConfig:
    """
    Parsed config entry for a single wrapped object, e.g.:

    {
      "path": "data/demo.h5ad",
      "wrapper": "anndata",
      "embeddings": ["X_umap", "X_pca"],
      "embedding_names": {"X_umap": "UMAP"},
      "cell_set_columns": ["cluster"]
    }

    Everything besides path / wrapper is handed to the wrapper as options.
    """

    raw: Dict[str, Any]
    index: int

    @property
    def path(self) -> Path:
        """
        Supports both "path" and the legacy "file" key.
        """
        raw_path = self.raw.get("path") or self.raw.get("file")
        if raw_path is None:
            raise ConfigError(f"No 'path' or 'file' in object config: {self.raw}")
        return Path(raw_path)

    @property
    def wrapper(self) -> Optional[str]:
        """Explicit wrapper id; None lets the registry pick by object type."""
        return self.raw.get("wrapper")

    @property
    def options(self) -> Dict[str, Any]:
        return {k: v for k, v in self.raw.items() if k not in _OBJECT_RESERVED_KEYS}


@dataclass
class DatasetConfig:
    """
    Parsed config file for a single dataset (datasets/<name>.json).
    """

    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def id(self) -> str:
        dataset_id = self.raw.get("id")
        if not dataset_id:
            raise ConfigError(f"Dataset config {self.source_path} has no 'id'")
        return str(dataset_id)

    @property
    def name(self) -> str:
        return self.raw.get("name", self.id)

    @property
    def objects(self) -> List[ObjectConfig]:
        entries = self.raw.get("objects")
        if not isinstance(entries, list) or not entries:
            raise ConfigError(f"Dataset config {self.source_path} needs a non-empty 'objects' list")
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ConfigError(
                    f"Object {i} in {self.source_path} must be a JSON object, got {type(entry).__name__}"
                )
        return [ObjectConfig(raw=entry, index=i) for i, entry in enumerate(entries)]

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> DatasetConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    name: str
    description: str
    port: int
    datasets: List[DatasetConfig] = field(default_factory=list)
    data_root: Optional[Path] = None
