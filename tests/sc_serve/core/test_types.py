import pytest

from sc_serve.core.exceptions import UnknownTypeError
from sc_serve.core.types import DATA_TYPES, FILE_TYPES, DataType, FileType, data_type_for, resolve


def test_resolve_accepts_constant_name_and_identifier():
    assert resolve("data_type", "CELLS") == "cells"
    assert resolve("data_type", "cell-sets") == DataType.CELL_SETS
    assert resolve("file_type", "CELLS_JSON") == "cells.json"
    assert resolve("file_type", "genes.json") == FileType.GENES_JSON


def test_resolve_unknown_name_fails():
    with pytest.raises(UnknownTypeError) as exc:
        resolve("data_type", "spots")
    assert "spots" in str(exc.value)


def test_resolve_unknown_kind_fails():
    with pytest.raises(UnknownTypeError):
        resolve("colour", "cells")


def test_data_type_and_file_type_catalogs_are_separate():
    # a file type is not a data type
    with pytest.raises(UnknownTypeError):
        resolve("data_type", "cells.json")

    assert "cells" in DATA_TYPES.values()
    assert "cells.json" in FILE_TYPES.values()


def test_catalogs_are_read_only():
    with pytest.raises(TypeError):
        DATA_TYPES["SPOTS"] = "spots"


def test_one_data_type_has_several_file_types():
    assert data_type_for(FileType.GENES_JSON) == DataType.EXPRESSION_MATRIX
    assert data_type_for(FileType.CLUSTERS_JSON) == DataType.EXPRESSION_MATRIX
    assert data_type_for(FileType.EXPRESSION_MATRIX_ZARR) == DataType.EXPRESSION_MATRIX
    assert data_type_for("CELLS_JSON") == DataType.CELLS


def test_every_file_type_maps_to_a_known_data_type():
    for file_type in FILE_TYPES.values():
        assert data_type_for(file_type) in DATA_TYPES.values()
