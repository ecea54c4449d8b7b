"""
Closed catalogs of the data types and file types a wrapper may emit.

The catalogs are fixed at import time; there is no runtime registration.
Wrappers resolve every identifier through `resolve` so an out-of-catalog tag
fails at setup instead of reaching the client.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .exceptions import UnknownTypeError


class DataType:
    """Semantic shape of a payload."""

    CELLS = "cells"
    CELL_SETS = "cell-sets"
    EXPRESSION_MATRIX = "expression-matrix"
    GENOMIC_PROFILES = "genomic-profiles"
    MOLECULES = "molecules"
    NEIGHBORHOODS = "neighborhoods"
    RASTER = "raster"


class FileType:
    """Serialization / transport convention of a payload."""

    CELLS_JSON = "cells.json"
    CELL_SETS_JSON = "cell-sets.json"
    EXPRESSION_MATRIX_ZARR = "expression-matrix.zarr"
    CLUSTERS_JSON = "clusters.json"
    GENES_JSON = "genes.json"
    GENOMIC_PROFILES_ZARR = "genomic-profiles.zarr"
    MOLECULES_JSON = "molecules.json"
    NEIGHBORHOODS_JSON = "neighborhoods.json"
    RASTER_JSON = "raster.json"
    ANNDATA_CELLS_ZARR = "anndata-cells.zarr"
    ANNDATA_CELL_SETS_ZARR = "anndata-cell-sets.zarr"
    ANNDATA_EXPRESSION_MATRIX_ZARR = "anndata-expression-matrix.zarr"


def _catalog(cls: type) -> Mapping[str, str]:
    return MappingProxyType(
        {name: value for name, value in vars(cls).items() if name.isupper()}
    )


DATA_TYPES: Mapping[str, str] = _catalog(DataType)
FILE_TYPES: Mapping[str, str] = _catalog(FileType)

_CATALOGS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {"data_type": DATA_TYPES, "file_type": FILE_TYPES}
)

# Which data type each file type encodes. One data type may have several
# valid encodings (expression-matrix has four).
_FILE_TYPE_DATA_TYPE: Mapping[str, str] = MappingProxyType(
    {
        FileType.CELLS_JSON: DataType.CELLS,
        FileType.CELL_SETS_JSON: DataType.CELL_SETS,
        FileType.EXPRESSION_MATRIX_ZARR: DataType.EXPRESSION_MATRIX,
        FileType.CLUSTERS_JSON: DataType.EXPRESSION_MATRIX,
        FileType.GENES_JSON: DataType.EXPRESSION_MATRIX,
        FileType.GENOMIC_PROFILES_ZARR: DataType.GENOMIC_PROFILES,
        FileType.MOLECULES_JSON: DataType.MOLECULES,
        FileType.NEIGHBORHOODS_JSON: DataType.NEIGHBORHOODS,
        FileType.RASTER_JSON: DataType.RASTER,
        FileType.ANNDATA_CELLS_ZARR: DataType.CELLS,
        FileType.ANNDATA_CELL_SETS_ZARR: DataType.CELL_SETS,
        FileType.ANNDATA_EXPRESSION_MATRIX_ZARR: DataType.EXPRESSION_MATRIX,
    }
)


def resolve(kind: str, name: str) -> str:
    """
    Resolve a catalog entry to its identifier string.

    :param kind: "data_type" or "file_type"
    :param name: either the constant name ("CELLS") or the identifier itself ("cells")
    :return: the identifier string
    :raises UnknownTypeError: if the kind or the name is not in the catalog
    """
    catalog = _CATALOGS.get(kind)
    if catalog is None:
        raise UnknownTypeError(
            f"Unknown type kind '{kind}'. Expected one of {sorted(_CATALOGS)}"
        )

    if name in catalog:
        return catalog[name]
    if name in catalog.values():
        return name

    raise UnknownTypeError(
        f"Unknown {kind} '{name}'. Known values: {sorted(catalog.values())}"
    )


def data_type_for(file_type: str) -> str:
    """Return the data type encoded by the given file type."""
    return _FILE_TYPE_DATA_TYPE[resolve("file_type", file_type)]
