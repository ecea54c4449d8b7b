from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from sc_serve.config.model import DEFAULT_PORT, DatasetConfig, GlobalConfig
from sc_serve.config.object_loader import from_config
from sc_serve.core.exceptions import ConfigError
from sc_serve.core.session import ServingSession
from sc_serve.core.wrapper_registry import WrapperRegistry, create_default_registry

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory.

    Expected structure:

        root/
            global.json
            datasets/
                dataset_1.json
                dataset_2.json
                ...

    global.json holds "name", "description", "port" and optionally "data_root";
    each file in 'datasets/' is parsed into a DatasetConfig.

    :param root: Directory containing 'global.json' and optionally 'datasets/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if a file is not valid JSON or has the wrong shape.
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    datasets_dir = root / "datasets"
    datasets: List[DatasetConfig] = []

    if datasets_dir.is_dir():
        for idx, config_file in enumerate(sorted(datasets_dir.glob("*.json"))):
            raw = _read_json(config_file)
            datasets.append(DatasetConfig.from_raw(raw, source_path=config_file, index=idx))

    # Relative data_root is resolved against the config root
    data_root_raw = raw_global.get("data_root")
    if data_root_raw is None:
        data_root = None
    else:
        data_root_path = Path(data_root_raw)
        data_root = data_root_path if data_root_path.is_absolute() else (root / data_root_path).resolve()

    try:
        port = int(raw_global.get("port", DEFAULT_PORT))
    except (TypeError, ValueError):
        raise ConfigError(f"'port' in {global_path} must be an integer") from None

    return GlobalConfig(
        name=raw_global.get("name", "sc_serve"),
        description=raw_global.get("description", ""),
        port=port,
        datasets=datasets,
        data_root=data_root,
    )


def _read_json(path: Path) -> dict:
    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return raw


def load_session(
    root: Path,
    global_config: Optional[GlobalConfig] = None,
    registry: Optional[WrapperRegistry] = None,
) -> ServingSession:
    """
    Build a ServingSession with every configured dataset and wrapped object.

    Main entrypoint used by app.py. The returned session still needs
    `setup(port)` before serving.
    """
    root = Path(root)
    global_config = global_config or load_global_config(root)
    registry = registry or create_default_registry()
    object_root = global_config.data_root or root

    session = ServingSession(name=global_config.name, description=global_config.description)

    for ds_cfg in global_config.datasets:
        try:
            dataset = session.add_dataset(ds_cfg.id, ds_cfg.name)
        except ValueError as e:
            raise ConfigError(f"{ds_cfg.source_path}: {e}") from e

        for obj_cfg in ds_cfg.objects:
            dataset.add_object(from_config(obj_cfg, config_root=object_root, registry=registry))

    logger.info(
        "Datasets loaded from config root",
        extra={
            "config_root": str(root),
            "n_datasets": len(session.datasets),
            "dataset_ids": [ds.dataset_id for ds in session.datasets],
        },
    )
    return session
