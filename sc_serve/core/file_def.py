from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .exceptions import TypeMismatchError
from .types import data_type_for, resolve


@dataclass(frozen=True)
class FileDefinition:
    """
    Manifest entry telling the client where and how to fetch one payload.

    Both tags are validated against the type catalogs on construction, and the
    file type must be an encoding of the data type.

    :raises UnknownTypeError: if either tag is not in its catalog
    :raises TypeMismatchError: if the file type encodes another data type
    """

    data_type: str
    file_type: str
    url: Optional[str] = None
    options: Optional[Mapping[str, Any]] = field(default=None)

    def __post_init__(self) -> None:
        data_type = resolve("data_type", self.data_type)
        file_type = resolve("file_type", self.file_type)

        encoded = data_type_for(file_type)
        if encoded != data_type:
            raise TypeMismatchError(
                f"File type '{file_type}' is an encoding of '{encoded}', not of '{data_type}'"
            )

        # Normalise constant names ("CELLS") to identifiers ("cells")
        object.__setattr__(self, "data_type", data_type)
        object.__setattr__(self, "file_type", file_type)
        if self.options is not None:
            object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing shape; absent url / options are omitted."""
        out: Dict[str, Any] = {"type": self.data_type, "fileType": self.file_type}
        if self.url is not None:
            out["url"] = self.url
        if self.options is not None:
            out["options"] = dict(self.options)
        return out
