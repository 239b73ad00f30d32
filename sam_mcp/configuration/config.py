from __future__ import annotations

import io
from inspect import isclass
from pathlib import Path
from typing import Any, Type

import yaml
from dotenv import load_dotenv

from sam_mcp.utility import dget, dotexists, dotset, env2dict, replace_env_vars

# pylint: disable=too-many-arguments


class TolerantLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """SafeLoader that reads custom tags (e.g. `!secret x`) as their untagged value"""

    def construct_untagged(self, node: yaml.Node) -> Any:
        if isinstance(node, yaml.MappingNode):
            return self.construct_mapping(node)
        if isinstance(node, yaml.SequenceNode):
            return self.construct_sequence(node)
        return self.construct_scalar(node)


TolerantLoader.add_constructor(None, TolerantLoader.construct_untagged)

class Config:
    """Container for configuration elements."""

    def __init__(
        self,
        *,
        data: dict | None = None,
        context: str = "default",
        filename: str | None = None,
    ):
        self.data: dict | None = data
        self.context: str = context
        self.filename: str | None = filename

    def get(self, *keys: str, default: Any | Type[Any] = None, mandatory: bool = False) -> Any:
        if self.data is None:
            raise ValueError("Configuration not initialized")

        if mandatory and not self.exists(*keys):
            raise ValueError(f"Missing mandatory key: {'/'.join(keys)}")

        value: Any = dget(self.data, *keys)

        if value is not None:
            return value

        if callable(default) and not isinstance(default, type):
            return default()

        return default() if isclass(default) else default

    def update(self, data: tuple[str, Any] | dict[str, Any] | list[tuple[str, Any]]) -> None:
        if self.data is None:
            self.data = {}
        items = [data] if isinstance(data, tuple) else data.items() if isinstance(data, dict) else data
        for key, value in items:
            dotset(self.data, key, value)

    def exists(self, *keys: str) -> bool:
        return False if self.data is None else dotexists(self.data, *keys)


class ConfigFactory:
    """Factory for creating Config instances."""

    def load(
        self,
        *,
        source: str | dict | Config | None = None,
        context: str | None = None,
        env_filename: str | None = None,
        env_prefix: str | None = None,
    ) -> Config:

        load_dotenv(dotenv_path=env_filename)

        if isinstance(source, Config):
            return source

        if source is None:
            source = {}

        data: Any = self.read(source) if isinstance(source, str) else source

        if not isinstance(data, dict):
            raise TypeError(f"expected dict, found '{type(data)}'")

        # Expand "${ENV_NAME}" placeholders first so prefixed overrides win
        data = replace_env_vars(data)

        data = env2dict(env_prefix, data)

        return Config(
            data=data,
            context=context or "default",
            filename=source if self.is_config_path(source) else None,
        )

    def read(self, source: str) -> Any:
        """Parse a YAML file path or an inline YAML document"""
        text: str = Path(source).read_text(encoding="utf-8") if self.is_config_path(source, raise_if_missing=True) else source
        return yaml.load(io.StringIO(text), Loader=TolerantLoader)

    @staticmethod
    def is_config_path(source: Any, raise_if_missing: bool = True) -> bool:
        """Test if the source is a valid path to a configuration file."""
        if not isinstance(source, str):
            return False
        if not source.endswith(".yaml") and not source.endswith(".yml"):
            return False
        if raise_if_missing and not Path(source).exists():
            raise FileNotFoundError(f"Configuration file not found: {source}")
        return True
