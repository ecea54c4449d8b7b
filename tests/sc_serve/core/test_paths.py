import itertools

import pytest

from sc_serve.core.paths import build_path, build_url, canonical_path


def test_build_path_basic():
    assert build_path("d", 0, "cells") == "/d/0/cells"
    assert build_path("d", 1, "cell-sets") == "/d/1/cell-sets"


def test_build_path_is_injective_over_tricky_inputs():
    dataset_ids = ["d", "d/0", "a b", "d%2F0", "ü", "0"]
    indices = [0, 1, 10]
    suffixes = ["cells", "0/cells", "cells/", "cell-sets"]

    triples = list(itertools.product(dataset_ids, indices, suffixes))
    paths = [build_path(*t) for t in triples]

    assert len(set(paths)) == len(triples)


def test_build_path_escapes_separator_in_dataset_id():
    # '/d/0' + '/cells' must not look like dataset 'd', index 0
    assert build_path("d/0", 1, "cells") == "/d%2F0/1/cells"
    assert build_path("d/0", 1, "cells") != build_path("d", 0, "1/cells")


@pytest.mark.parametrize(
    "dataset_id, obj_i, suffix",
    [
        ("", 0, "cells"),
        ("d", -1, "cells"),
        ("d", True, "cells"),
        ("d", 1.0, "cells"),
        ("d", 0, ""),
    ],
)
def test_build_path_rejects_invalid_input(dataset_id, obj_i, suffix):
    with pytest.raises(ValueError):
        build_path(dataset_id, obj_i, suffix)


def test_build_url_prefixes_localhost_and_port():
    for dataset_id, obj_i, suffix in [("d", 0, "cells"), ("a b", 3, "expression-matrix")]:
        assert build_url(8000, dataset_id, obj_i, suffix) == (
            "http://localhost:" + str(8000) + build_path(dataset_id, obj_i, suffix)
        )


def test_canonical_path_restores_encoded_dataset_id():
    # what a WSGI server hands over after percent-decoding
    assert canonical_path("d/0/cells") == "/d/0/cells"
    assert canonical_path("a b/2/cells") == build_path("a b", 2, "cells")
    assert canonical_path("d/0/1/cells") == build_path("d/0", 1, "cells")


def test_canonical_path_other_shapes():
    assert canonical_path("nope") == "/nope"
    assert canonical_path("d/x/cells") == "/d/x/cells"


@pytest.mark.parametrize("dataset_id", ["/a", "a/", "a//b", "//"])
def test_canonical_path_keeps_slashes_inside_dataset_id(dataset_id):
    # decoded form of build_path: '%2F' has turned back into '/'
    decoded = f"/{dataset_id}/0/cells"

    assert canonical_path(decoded) == build_path(dataset_id, 0, "cells")
