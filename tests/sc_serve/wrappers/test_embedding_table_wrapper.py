import pandas as pd
import pytest

from sc_serve.core.exceptions import MissingRequiredFieldError
from sc_serve.core.json_policy import dumps
from sc_serve.core.types import DataType
from sc_serve.wrappers import EmbeddingTableWrapper


def _make_table():
    return pd.DataFrame(
        {
            "umap_1": [0.0, 1.0, 2.0],
            "umap_2": [0.5, 1.5, 2.5],
            "tsne_1": [9.0, 8.0, 7.0],
            "tsne_2": [6.0, 5.0, 4.0],
        },
        index=["c1", "c2", "c3"],
    )


def test_cells_from_column_pairs():
    wrapper = EmbeddingTableWrapper(
        _make_table(),
        embeddings={"UMAP": ("umap_1", "umap_2"), "t-SNE": ["tsne_1", "tsne_2"]},
    )

    result = wrapper.get_cells(8000, "table", 0)

    (route,) = result.routes
    assert route.path == "/table/0/cells"
    payload = route.responder()
    assert list(payload) == ["c1", "c2", "c3"]
    assert payload["c2"]["mappings"] == {"UMAP": [1.0, 1.5], "t-SNE": [8.0, 5.0]}


def test_cells_without_embeddings():
    result = EmbeddingTableWrapper(_make_table()).get_cells(8000, "table", 0)

    assert dumps(result.routes[0].responder()) == (
        '{"c1": {"mappings": {}}, "c2": {"mappings": {}}, "c3": {"mappings": {}}}'
    )
    assert len(result.file_defs) == 1


def test_missing_column_fails():
    wrapper = EmbeddingTableWrapper(_make_table(), embeddings={"PCA": ("pc_1", "pc_2")})

    with pytest.raises(MissingRequiredFieldError):
        wrapper.get_cells(8000, "table", 0)


def test_embedding_needs_two_columns():
    with pytest.raises(ValueError):
        EmbeddingTableWrapper(_make_table(), embeddings={"UMAP": ("umap_1",)})


def test_duplicate_index_keeps_first_row():
    df = pd.DataFrame({"x": [1.0, 2.0], "y": [3.0, 4.0]}, index=["c1", "c1"])

    payload = EmbeddingTableWrapper(df, embeddings={"xy": ("x", "y")}).get_cells(8000, "t", 0).routes[0].responder()

    assert payload == {"c1": {"mappings": {"xy": [1.0, 3.0]}}}


def test_only_cells_capability_is_offered():
    wrapper = EmbeddingTableWrapper(_make_table())

    assert wrapper.get_cell_sets(8000, "table", 0).is_empty()
    assert wrapper.get_expression_matrix(8000, "table", 0).is_empty()
    assert wrapper.supported_data_types() == [DataType.CELLS]
