import os

from loguru import logger

from sam_mcp.utility import configure_logging

from .config import Config
from .inject import ConfigStore

ENV_PREFIX = "SAM_MCP"


def setup_config_store(filename: str = "config/config.yml", env_filename: str | None = None) -> Config:
    """Load the configuration file into the Config Store (once) and configure logging"""

    config_file: str = os.getenv("CONFIG_FILE", filename)
    env_file: str = env_filename or os.getenv("ENV_FILE", ".env")
    store: ConfigStore = ConfigStore.get_instance()

    if store.is_configured():
        return store.config()

    store.configure_context(source=config_file, env_filename=env_file, env_prefix=ENV_PREFIX)

    cfg: Config = store.config()

    cfg.update({"runtime:config_file": config_file})

    configure_logging(cfg.get("logging") or {})

    logger.info(f"Config Store initialized from {config_file}")

    return cfg
