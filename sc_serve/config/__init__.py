from .io import load_global_config, load_session
from .model import DatasetConfig, GlobalConfig, ObjectConfig

__all__ = ["load_global_config", "load_session", "DatasetConfig", "GlobalConfig", "ObjectConfig"]
