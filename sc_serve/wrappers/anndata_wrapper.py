from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import anndata as ad
import numpy as np
import pandas as pd

from sc_serve.core.exceptions import MissingRequiredFieldError
from sc_serve.core.json_policy import JsonObject, json_array, json_object
from sc_serve.core.types import DataType, FileType
from sc_serve.core.wrapper import AbstractWrapper, CapabilityResult

logger = logging.getLogger(__name__)

CELL_SETS_VERSION = "0.1.3"


def _as_matrix(value: Any) -> np.ndarray:
    """Dense 2D view of an obsm entry (ndarray, DataFrame or sparse)."""
    if isinstance(value, pd.DataFrame):
        return value.to_numpy()
    if hasattr(value, "toarray"):
        return value.toarray()
    return np.asarray(value)


class AnnDataWrapper(AbstractWrapper):
    """
    Wrapper around an AnnData object.

    - cells: per-cell 2D coordinates from .obsm embeddings
    - cell-sets: one hierarchy node per configured .obs column
    - expression-matrix: per-gene values from .X (genes.json)

    The AnnData object is only ever read. Cells and embeddings are emitted in
    the order they are stored; nothing is re-sorted.
    """

    id = "anndata"

    def __init__(
        self,
        adata: ad.AnnData,
        cell_id_column: Optional[str] = None,
        embeddings: Optional[Sequence[str]] = None,
        embedding_names: Optional[Mapping[str, str]] = None,
        cell_set_columns: Optional[Sequence[str]] = None,
        genes: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(adata)
        self.cell_id_column = cell_id_column
        self.embeddings = list(embeddings) if embeddings is not None else None
        self.embedding_names: Dict[str, str] = dict(embedding_names or {})
        if len(set(self.embedding_names.values())) != len(self.embedding_names):
            raise ValueError(f"embedding_names maps several embeddings to one name: {self.embedding_names}")
        self.cell_set_columns: List[str] = list(cell_set_columns or [])
        self.genes = list(genes) if genes is not None else None

    @classmethod
    def can_wrap(cls, obj: Any) -> bool:
        return isinstance(obj, ad.AnnData)

    @property
    def adata(self) -> ad.AnnData:
        return self.obj

    # -------------------------------------------------------------------------
    # Reading the wrapped object
    # -------------------------------------------------------------------------
    def _unique_cells(self) -> Tuple[List[str], np.ndarray]:
        """
        Return (cell ids, row positions) with duplicates dropped.

        The first occurrence of a duplicated id wins.
        """
        adata = self.adata

        if self.cell_id_column is None:
            ids = pd.Index(adata.obs_names).astype(str)
        else:
            if self.cell_id_column not in adata.obs.columns:
                raise MissingRequiredFieldError(
                    f"Cell id column '{self.cell_id_column}' not found in .obs. "
                    f"Available columns: {list(adata.obs.columns)}"
                )
            ids = pd.Index(adata.obs[self.cell_id_column].astype(str))

        keep = ~ids.duplicated(keep="first")
        if not keep.all():
            logger.warning(
                "Duplicate cell ids; keeping first occurrence",
                extra={"n_duplicates": int((~keep).sum()), "cell_id_column": self.cell_id_column},
            )

        positions = np.flatnonzero(keep)
        return [str(c) for c in ids[keep]], positions

    def _embedding_keys(self) -> List[str]:
        obsm = self.adata.obsm

        if self.embeddings is not None:
            for key in self.embeddings:
                if key not in obsm:
                    raise MissingRequiredFieldError(
                        f"Embedding '{key}' not found in .obsm. Available keys: {list(obsm.keys())}"
                    )
                arr = _as_matrix(obsm[key])
                if arr.ndim != 2 or arr.shape[1] < 2:
                    raise MissingRequiredFieldError(
                        f"Embedding '{key}' must be 2D with at least 2 columns, got shape {arr.shape}"
                    )
            return list(self.embeddings)

        keys: List[str] = []
        for key in obsm.keys():
            arr = _as_matrix(obsm[key])
            if arr.ndim == 2 and arr.shape[1] >= 2:
                keys.append(str(key))
            else:
                logger.debug("Skipping obsm entry that is not a 2D embedding", extra={"obsm_key": key})
        return keys

    def _embedding_display_names(self) -> List[Tuple[str, str]]:
        """(obsm key, mapping name) pairs; two embeddings may not share a name."""
        pairs = [(key, self.embedding_names.get(key, key)) for key in self._embedding_keys()]

        seen: Dict[str, str] = {}
        for key, name in pairs:
            if name in seen:
                raise ValueError(f"Embeddings '{seen[name]}' and '{key}' are both named '{name}'")
            seen[name] = key
        return pairs

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------
    def get_cells(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        cell_ids, positions = self._unique_cells()
        payload = self.build_cells_payload(cell_ids, positions)
        return self._json_capability(
            payload, DataType.CELLS, FileType.CELLS_JSON, port, dataset_id, obj_i
        )

    def build_cells_payload(self, cell_ids: List[str], positions: np.ndarray) -> JsonObject:
        cells = json_object()
        for cell_id in cell_ids:
            cells[cell_id] = json_object({"mappings": json_object()})

        for key, name in self._embedding_display_names():
            coords = _as_matrix(self.adata.obsm[key])[positions, :2].tolist()
            for cell_id, (x, y) in zip(cell_ids, coords):
                cells[cell_id]["mappings"][name] = json_array([x, y])

        return cells

    def get_cell_sets(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        if not self.cell_set_columns:
            return CapabilityResult.empty()

        cell_ids, positions = self._unique_cells()
        obs = self.adata.obs

        tree = json_array()
        for column in self.cell_set_columns:
            if column not in obs.columns:
                raise MissingRequiredFieldError(
                    f"Cell set column '{column}' not found in .obs. Available columns: {list(obs.columns)}"
                )

            labels = obs[column].iloc[positions]
            if isinstance(labels.dtype, pd.CategoricalDtype):
                categories = list(labels.cat.categories)
            else:
                categories = list(pd.unique(labels.dropna()))

            members: Dict[Any, List[str]] = {category: [] for category in categories}
            for cell_id, label in zip(cell_ids, labels.tolist()):
                if label in members:
                    members[label].append(cell_id)

            children = json_array(
                json_object({
                    "name": str(category),
                    "set": json_array(json_array([cell_id, None]) for cell_id in members[category]),
                })
                for category in categories
            )
            tree.append(json_object({"name": column, "children": children}))

        payload = json_object({"version": CELL_SETS_VERSION, "datatype": "cell", "tree": tree})
        return self._json_capability(
            payload, DataType.CELL_SETS, FileType.CELL_SETS_JSON, port, dataset_id, obj_i
        )

    def get_expression_matrix(self, port: int, dataset_id: str, obj_i: int) -> CapabilityResult:
        adata = self.adata
        if adata.X is None:
            raise MissingRequiredFieldError("AnnData object has no .X matrix")

        var_names = pd.Index(adata.var_names).astype(str)
        genes = self.genes if self.genes is not None else list(var_names)
        if not genes:
            return CapabilityResult.empty()

        missing = [g for g in genes if g not in var_names]
        if missing:
            raise MissingRequiredFieldError(f"Genes not found in .var_names: {missing}")

        cell_ids, positions = self._unique_cells()
        columns = var_names.get_indexer(genes)

        X = adata.X[:, columns]
        if hasattr(X, "toarray"):
            X = X.toarray()
        X = np.asarray(X, dtype=float)[positions, :]

        payload = json_object()
        for j, gene in enumerate(genes):
            values = X[:, j]
            payload[gene] = json_object({
                "max": float(np.nanmax(values)) if values.size else 0.0,
                "cells": json_object(zip(cell_ids, values.tolist())),
            })

        return self._json_capability(
            payload, DataType.EXPRESSION_MATRIX, FileType.GENES_JSON, port, dataset_id, obj_i
        )
