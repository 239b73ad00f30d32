from .config import Config, ConfigFactory
from .inject import (
    ConfigProvider,
    ConfigStore,
    ConfigValue,
    MockConfigProvider,
    SingletonConfigProvider,
    get_config_provider,
    reset_config_provider,
    set_config_provider,
)
from .settings import PrefetchSettings, SamSettings, ServerSettings, TLSSettings, load_settings
from .setup import setup_config_store

__all__ = [
    "Config",
    "ConfigFactory",
    "ConfigProvider",
    "ConfigStore",
    "ConfigValue",
    "MockConfigProvider",
    "SingletonConfigProvider",
    "get_config_provider",
    "reset_config_provider",
    "set_config_provider",
    "PrefetchSettings",
    "SamSettings",
    "ServerSettings",
    "TLSSettings",
    "load_settings",
    "setup_config_store",
]
