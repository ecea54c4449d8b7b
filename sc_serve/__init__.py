"""
Top-level package for sc_serve.

Exposes in-memory single-cell objects (AnnData, pandas tables) to an external
visualization client over local HTTP. Most code should import from submodules:
    sc_serve.core
    sc_serve.wrappers
    sc_serve.server
    sc_serve.config
"""

__all__: list[str] = []
