from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import pandas as pd

from sc_serve.core.exceptions import MissingRequiredFieldError
from sc_serve.core.json_policy import json_array, json_object
from sc_serve.core.types import DataType, FileType
from sc_serve.core.wrapper import AbstractWrapper, CapabilityResult

logger = logging.getLogger(__name__)


class EmbeddingTableWrapper(AbstractWrapper):
    """
    Wrapper around a plain table of coordinates, e.g. exported from another tool:

        index   umap_1  umap_2  tsne_1  tsne_2
        c1      0.1     0.2     5.0     1.0
        ...

    The index holds the cell ids; `embeddings` names which column pair makes up
    each embedding ({"UMAP": ("umap_1", "umap_2")}). Only the cells capability
    is offered.
    """

    id = "embedding_table"

    def __init__(
        self,
        df: pd.DataFrame,
        embeddings: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        super().__init__(df)
        self.embeddings: Dict[str, tuple] = {
            name: tuple(columns) for name, columns in (embeddings or {}).items()
        }
        for name, columns in self.embeddings.items():
            if len(columns) != 2:
                raise ValueError(f"Embedding '{name}' needs exactly 2 columns, got {list(columns)}")

    @classmethod
    def can_wrap(cls, obj: Any) -> bool:
        return isinstance(obj, pd.DataFrame)

    @property
    def df(self) -> pd.DataFrame:
        return self.obj

    def get_cells(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        df = self.df

        for name, columns in self.embeddings.items():
            missing = [c for c in columns if c not in df.columns]
            if missing:
                raise MissingRequiredFieldError(
                    f"Embedding '{name}' columns {missing} not found. Available columns: {list(df.columns)}"
                )

        ids = df.index.astype(str)
        keep = ~ids.duplicated(keep="first")
        if not keep.all():
            logger.warning(
                "Duplicate cell ids in table index; keeping first occurrence",
                extra={"n_duplicates": int((~keep).sum())},
            )
        cell_ids = [str(c) for c in ids[keep]]

        cells = json_object()
        for cell_id in cell_ids:
            cells[cell_id] = json_object({"mappings": json_object()})

        for name, (x_col, y_col) in self.embeddings.items():
            coords = df.loc[keep, [x_col, y_col]].to_numpy(dtype=float).tolist()
            for cell_id, (x, y) in zip(cell_ids, coords):
                cells[cell_id]["mappings"][name] = json_array([x, y])

        return self._json_capability(
            cells, DataType.CELLS, FileType.CELLS_JSON, port, dataset_id, obj_i
        )
