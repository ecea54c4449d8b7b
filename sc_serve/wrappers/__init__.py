"""
Concrete wrappers, one per supported source-object shape.
"""

from .anndata_wrapper import AnnDataWrapper
from .embedding_table_wrapper import EmbeddingTableWrapper

__all__ = ["AnnDataWrapper", "EmbeddingTableWrapper"]
