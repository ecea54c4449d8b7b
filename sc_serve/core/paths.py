from __future__ import annotations

from urllib.parse import quote


def _encode_segment(value: str) -> str:
    # safe="" so '/' is escaped too; percent-encoding is injective
    return quote(value, safe="")


def build_path(dataset_id: str, obj_i: int, suffix: str) -> str:
    """
    Build the canonical route path for one payload of one wrapped object.

    Paths look like `/<dataset_id>/<obj_i>/<suffix>` with the dataset id and the
    suffix percent-encoded, so two distinct (dataset_id, obj_i, suffix) triples
    never produce the same path.

    :raises ValueError: on an empty dataset id / suffix or a non-int / negative index
    """
    if not isinstance(dataset_id, str) or not dataset_id:
        raise ValueError(f"dataset_id must be a non-empty string, got {dataset_id!r}")
    if isinstance(obj_i, bool) or not isinstance(obj_i, int) or obj_i < 0:
        raise ValueError(f"obj_i must be a non-negative int, got {obj_i!r}")
    if not isinstance(suffix, str) or not suffix:
        raise ValueError(f"suffix must be a non-empty string, got {suffix!r}")

    return f"/{_encode_segment(dataset_id)}/{obj_i}/{_encode_segment(suffix)}"


def build_url(port: int, dataset_id: str, obj_i: int, suffix: str) -> str:
    """Absolute localhost URL for `build_path(dataset_id, obj_i, suffix)`."""
    return f"http://localhost:{port}{build_path(dataset_id, obj_i, suffix)}"


def canonical_path(raw_path: str) -> str:
    """
    Map a path as decoded by the HTTP server back to its canonical route key.

    WSGI servers hand over PATH_INFO already percent-decoded (including '%2F'),
    so the last two segments are taken as index and suffix and everything before
    them is re-joined as the dataset id. Only the one separator slash is removed
    from the front; any further slashes belong to the dataset id. Paths that
    don't have that shape are returned with each segment re-encoded.
    """
    if raw_path.startswith("/"):
        raw_path = raw_path[1:]
    segments = raw_path.split("/")
    if len(segments) >= 3 and segments[-2].isdigit():
        dataset_id = "/".join(segments[:-2])
        return f"/{_encode_segment(dataset_id)}/{segments[-2]}/{_encode_segment(segments[-1])}"
    return "/" + "/".join(_encode_segment(s) for s in segments)
