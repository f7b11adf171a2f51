"""Configuration loading utilities for Wikimark."""

from __future__ import annotations

import logging
import os
from functools import wraps
from typing import Any, Callable, Dict

from flask import abort, g

from wikimark_core.content import SUPPORTED_SYNTAXES

logger = logging.getLogger(__name__)

CONFIG_CACHE: Dict[str, Dict[str, Any]] = {}

DEFAULT_MAX_CONTENT_LENGTH = 200_000

REQUIRED_KEYS = ("shared_secret",)


def config_path(endpoint_name: str) -> str:
    config_dir = os.environ.get("WIKIMARK_CONFIG_DIR", "..")
    return os.path.join(config_dir, f"wikimark.{endpoint_name}.properties")


def _parse_properties(file_handle) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for line in file_handle:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep:
            config[key.strip()] = value.strip()
    return config


def _apply_defaults(config: Dict[str, Any], path: str) -> None:
    syntax = config.setdefault("default_syntax", "wiki")
    if syntax not in SUPPORTED_SYNTAXES:
        abort(500, description=f"Unsupported default_syntax '{syntax}' in {path}")

    raw_limit = config.get("max_content_length", DEFAULT_MAX_CONTENT_LENGTH)
    try:
        limit = int(raw_limit)
    except (TypeError, ValueError):
        abort(500, description=f"max_content_length must be an integer in {path}")
    if limit <= 0:
        abort(500, description=f"max_content_length must be positive in {path}")
    config["max_content_length"] = limit


def load_config(endpoint_name: str) -> Dict[str, Any]:
    """Load configuration for the given endpoint from disk."""
    if endpoint_name in CONFIG_CACHE:
        return CONFIG_CACHE[endpoint_name]

    path = config_path(endpoint_name)
    if not os.path.exists(path):
        logger.warning("No configuration found for endpoint %s at %s", endpoint_name, path)
        abort(404, description=f"Configuration for endpoint '{endpoint_name}' not found")

    with open(path, "r", encoding="utf-8") as file_handle:
        config = _parse_properties(file_handle)

    for key in REQUIRED_KEYS:
        if key not in config:
            abort(500, description=f"Missing required config key '{key}' in {path}")
    _apply_defaults(config, path)

    CONFIG_CACHE[endpoint_name] = config
    logger.info("Loaded configuration for endpoint %s", endpoint_name)
    return config


def with_config(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that injects endpoint configuration into the Flask global."""

    @wraps(func)
    def wrapper(endpoint_name: str, *args: Any, **kwargs: Any):
        g.config = load_config(endpoint_name)
        return func(endpoint_name, *args, **kwargs)

    return wrapper
