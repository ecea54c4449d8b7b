from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import anndata as ad
import pandas as pd

from sc_serve.config.model import ObjectConfig
from sc_serve.core.exceptions import ConfigError
from sc_serve.core.wrapper import AbstractWrapper
from sc_serve.core.wrapper_registry import WrapperRegistry, create_default_registry

logger = logging.getLogger(__name__)


def resolve_object_path(cfg: ObjectConfig, config_root: Optional[Path] = None) -> Path:
    """
    Resolve a relative object path.

    Relative paths are resolved against SC_SERVE_DATA_ROOT when set, else
    against the config root.
    """
    path = cfg.path
    if path.is_absolute():
        return path

    data_root = os.environ.get("SC_SERVE_DATA_ROOT")
    if data_root:
        return Path(data_root) / path
    if config_root is not None:
        return config_root / path
    return path


def read_object(path: Path) -> Any:
    """Read a supported file into an in-memory object."""
    if not path.is_file():
        raise ConfigError(f"Data file not found at {path}.")

    suffix = path.suffix.lower()
    if suffix == ".h5ad":
        return ad.read_h5ad(path)
    if suffix == ".csv":
        return pd.read_csv(path, index_col=0)

    raise ConfigError(f"Unsupported data file type '{suffix}' ({path}); expected .h5ad or .csv")


def from_config(
    cfg: ObjectConfig,
    config_root: Optional[Path] = None,
    registry: Optional[WrapperRegistry] = None,
) -> AbstractWrapper:
    """
    Materialise a wrapped object from its config entry.
    """
    registry = registry or create_default_registry()
    path = resolve_object_path(cfg, config_root)
    obj = read_object(path)

    try:
        if cfg.wrapper is not None:
            wrapper_cls = registry.get(cfg.wrapper)
            if not wrapper_cls.can_wrap(obj):
                raise ConfigError(
                    f"Wrapper '{cfg.wrapper}' cannot wrap {type(obj).__name__} read from {path}"
                )
            wrapper = wrapper_cls(obj, **cfg.options)
        else:
            wrapper = registry.create(obj, **cfg.options)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(
            "Invalid object config",
            extra={"path": str(path), "wrapper": cfg.wrapper, "error": str(e)},
        )
        raise ConfigError(f"Invalid object config for {path}: {e}") from e

    logger.info(
        "Loaded wrapped object",
        extra={"path": str(path), "wrapper": wrapper.id, "data_types": wrapper.supported_data_types()},
    )
    return wrapper
