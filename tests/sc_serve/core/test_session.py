import anndata as ad
import numpy as np
import pandas as pd
import pytest

from sc_serve.core.exceptions import DuplicatePathError, RouteNotFoundError, UnknownTypeError
from sc_serve.core.json_policy import json_object
from sc_serve.core.session import ServingSession
from sc_serve.core.types import DataType, FileType
from sc_serve.core.wrapper import AbstractWrapper
from sc_serve.wrappers import AnnDataWrapper, EmbeddingTableWrapper


def _make_adata():
    obs = pd.DataFrame({"cluster": pd.Categorical(["A", "B"])}, index=["c1", "c2"])
    adata = ad.AnnData(X=np.array([[1.0, 0.0], [0.0, 2.0]]), obs=obs, var=pd.DataFrame(index=["g1", "g2"]))
    adata.obsm["pca"] = np.array([[1.0, 2.0], [3.0, 4.0]])
    return adata


class _FixedPathWrapper(AbstractWrapper):
    """Ignores dataset/index when building its path: always collides."""

    id = "fixed"

    @classmethod
    def can_wrap(cls, obj):
        return True

    def get_cells(self, port, dataset_id, obj_i):
        return self._json_capability(
            json_object(), DataType.CELLS, FileType.CELLS_JSON, port, "same", 0
        )


def test_object_indices_are_sequential():
    session = ServingSession()
    dataset = session.add_dataset("d")

    assert dataset.add_object(AnnDataWrapper(_make_adata())) == 0
    assert dataset.add_object(AnnDataWrapper(_make_adata())) == 1
    assert len(dataset.objects) == 2


def test_two_objects_in_one_dataset_do_not_collide():
    session = ServingSession()
    dataset = session.add_dataset("d")
    dataset.add_object(AnnDataWrapper(_make_adata()))
    dataset.add_object(AnnDataWrapper(_make_adata()))

    session.setup(8000, data_types=[DataType.CELLS])

    assert session.route_table.paths() == ["/d/0/cells", "/d/1/cells"]
    assert [fd.url for fd in session.file_defs("d")] == [
        "http://localhost:8000/d/0/cells",
        "http://localhost:8000/d/1/cells",
    ]


def test_setup_registers_every_capability_and_freezes():
    session = ServingSession(name="Test")
    dataset = session.add_dataset("d", name="Dataset D")
    dataset.add_object(AnnDataWrapper(_make_adata(), cell_set_columns=["cluster"]))
    dataset.add_object(EmbeddingTableWrapper(pd.DataFrame({"x": [0.0], "y": [1.0]}, index=["c1"])))

    session.setup(8000)

    assert session.is_set_up
    assert session.route_table.frozen
    assert session.route_table.paths() == [
        "/d/0/cells",
        "/d/0/cell-sets",
        "/d/0/expression-matrix",
        "/d/1/cells",
    ]
    assert session.dispatch("/d/0/cells")["c2"]["mappings"]["pca"] == [3.0, 4.0]


def test_manifest_lists_file_definitions_per_dataset():
    session = ServingSession(name="Test", description="desc")
    session.add_dataset("d1").add_object(AnnDataWrapper(_make_adata()))
    session.add_dataset("d2", name="Second")

    session.setup(9000, data_types=["cells"])
    manifest = session.manifest()

    assert manifest["name"] == "Test"
    assert manifest["description"] == "desc"
    assert manifest["datasets"] == [
        {
            "uid": "d1",
            "name": "d1",
            "files": [{"type": "cells", "fileType": "cells.json", "url": "http://localhost:9000/d1/0/cells"}],
        },
        {"uid": "d2", "name": "Second", "files": []},
    ]


def test_missing_required_field_skips_only_that_capability(caplog):
    session = ServingSession()
    dataset = session.add_dataset("d")
    # cell_set_columns points at a column that doesn't exist
    dataset.add_object(AnnDataWrapper(_make_adata(), cell_set_columns=["missing"]))

    with caplog.at_level("ERROR"):
        session.setup(8000)

    assert "/d/0/cells" in session.route_table
    assert "/d/0/cell-sets" not in session.route_table
    assert "/d/0/expression-matrix" in session.route_table
    assert any("Capability skipped" in r.getMessage() for r in caplog.records)


def test_duplicate_path_aborts_setup_and_leaves_nothing_behind():
    session = ServingSession()
    session.add_dataset("a").add_object(_FixedPathWrapper(None))
    session.add_dataset("b").add_object(_FixedPathWrapper(None))

    with pytest.raises(DuplicatePathError):
        session.setup(8000)

    assert not session.is_set_up
    assert len(session.route_table) == 0


def test_unknown_data_type_aborts_setup():
    session = ServingSession()
    session.add_dataset("d").add_object(AnnDataWrapper(_make_adata()))

    with pytest.raises(UnknownTypeError):
        session.setup(8000, data_types=["spots"])


def test_duplicate_dataset_id_fails():
    session = ServingSession()
    session.add_dataset("d")

    with pytest.raises(ValueError):
        session.add_dataset("d")


def test_setup_twice_requires_teardown():
    session = ServingSession()
    session.add_dataset("d").add_object(AnnDataWrapper(_make_adata()))
    session.setup(8000)

    with pytest.raises(RuntimeError):
        session.setup(8001)

    session.teardown()
    assert not session.is_set_up
    with pytest.raises(RouteNotFoundError):
        session.dispatch("/d/0/cells")
    assert session.file_defs("d") == []

    session.setup(8001)
    assert session.file_defs("d")[0].url == "http://localhost:8001/d/0/cells"


def test_add_object_after_setup_requires_teardown():
    session = ServingSession()
    dataset = session.add_dataset("d")
    dataset.add_object(AnnDataWrapper(_make_adata()))
    session.setup(8000, data_types=[DataType.CELLS])

    with pytest.raises(RuntimeError):
        dataset.add_object(AnnDataWrapper(_make_adata()))
    assert len(dataset.objects) == 1

    session.teardown()
    assert dataset.add_object(AnnDataWrapper(_make_adata())) == 1

    session.setup(8000, data_types=[DataType.CELLS])
    assert session.route_table.paths() == ["/d/0/cells", "/d/1/cells"]


def test_failed_setup_leaves_datasets_open():
    session = ServingSession()
    dataset = session.add_dataset("d")
    dataset.add_object(_FixedPathWrapper(None))
    dataset.add_object(_FixedPathWrapper(None))

    with pytest.raises(DuplicatePathError):
        session.setup(8000)

    assert dataset.add_object(AnnDataWrapper(_make_adata())) == 2
