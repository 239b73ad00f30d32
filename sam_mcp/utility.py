import os
import sys
from datetime import datetime
from typing import Any

from loguru import logger


def recursive_update(d1: dict, d2: dict) -> dict:
    """
    Recursively updates d1 with values from d2. If a value in d1 is a dictionary,
    and the corresponding value in d2 is also a dictionary, it recursively updates that dictionary.
    """
    for key, value in d2.items():
        if isinstance(value, dict) and key in d1 and isinstance(d1[key], dict):
            recursive_update(d1[key], value)
        else:
            d1[key] = value
    return d1


def dget(data: dict, *path: str, default: Any = None) -> Any:
    if path is None or not data:
        return default

    d = None

    for p in path:
        d = dotget(data, p)

        if d is not None:
            return d

    return d or default


def dotexists(data: dict, *paths: str) -> bool:
    for path in paths:
        if dotget(data, path, default="@@") != "@@":
            return True
    return False


def dotexpand(paths: str | list[str]) -> list[str]:
    """Expands paths with ',' and ':'."""
    if not paths:
        return []
    if not isinstance(paths, (str, list)):
        raise ValueError("dot path must be a string or list of strings")
    paths = paths if isinstance(paths, list) else [paths]
    expanded_paths: list[str] = []
    for p in paths:
        for q in p.replace(" ", "").split(","):
            if not q:
                continue
            if ":" in q:
                expanded_paths.extend([q.replace(":", "."), q.replace(":", "_")])
            else:
                expanded_paths.append(q)
    return expanded_paths


def dotget(data: dict, path: str, default: Any = None) -> Any:
    """Gets element from dict. Path can be x.y.y or x_y_y or x:y:y.
    if path is x:y:y then element is search using both x.y.y or x_y_y."""

    for key in dotexpand(path):
        d: dict | None = data
        for attr in key.split("."):
            d = d.get(attr) if isinstance(d, dict) else None
            if d is None:
                break
        if d is not None:
            return d
    return default


def dotset(data: dict, path: str, value: Any) -> dict:
    """Sets element in dict using dot notation x.y.z or x:y:z"""

    d: dict = data
    attrs: list[str] = path.replace(":", ".").split(".")
    for attr in attrs[:-1]:
        if not attr:
            continue
        d = d.setdefault(attr, {})
    d[attrs[-1]] = value

    return data


def env_key_path(name: str) -> str:
    """Map an unprefixed variable name to a dotted config path.

    The first "_" separates the section from the key; "__" marks each further
    level, so `server_tls__cert_file` becomes `server:tls:cert_file`.
    """
    head, _, rest = name.partition("__")
    path: str = head.replace("_", ":", 1)
    return f"{path}:{rest.replace('__', ':')}" if rest else path


def env2dict(prefix: str, data: dict[str, Any] | None = None, lower_key: bool = True) -> dict[str, Any]:
    """Loads environment variables starting with prefix into data.

    `SAM_MCP_SERVER_PORT=8443` with prefix `SAM_MCP` ends up as data["server"]["port"],
    `SAM_MCP_SERVER_TLS__CERT_FILE=c.pem` as data["server"]["tls"]["cert_file"].
    """
    if data is None:
        data = {}
    if not prefix:
        return data
    if lower_key:
        prefix = prefix.lower()
    for key, value in os.environ.items():
        if lower_key:
            key = key.lower()
        if key.startswith(prefix + "_"):
            dotset(data, env_key_path(key[len(prefix) + 1 :]), value)
    return data


def replace_env_vars(data: dict[str, Any] | list[Any] | str) -> dict[str, Any] | list[Any] | str:
    """Searches data recursively for string values like ${ENV_VAR} and replaces them with os.getenv("ENV_VAR", "")"""
    if isinstance(data, dict):
        return {k: replace_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [replace_env_vars(i) for i in data]
    if isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var: str = data[2:-1]
        return os.getenv(env_var, "")
    return data


def split_csv(value: str | list[str] | None) -> list[str]:
    """Split a comma separated string into trimmed, non-empty parts."""
    if not value:
        return []
    parts: list[str] = value if isinstance(value, list) else value.split(",")
    return [p.strip() for p in parts if p and p.strip()]


def configure_logging(opts: dict[str, Any] | None = None) -> None:

    logger.remove()
    logger.add(
        sys.stdout,
        level=(opts or {}).get("level", "INFO"),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
    )
    if not opts:
        return

    if opts.get("handlers"):

        for handler in opts["handlers"]:

            if not handler.get("sink"):
                continue

            if handler["sink"] == "sys.stdout":
                handler["sink"] = sys.stdout

            elif isinstance(handler["sink"], str) and handler["sink"].endswith(".log"):
                handler["sink"] = os.path.join(
                    opts.get("folder", "logs"),
                    f"{datetime.now().strftime('%Y%m%d')}_{handler['sink']}",
                )

        logger.configure(handlers=opts["handlers"])
