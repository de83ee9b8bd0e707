"""Entry point of the API gateway."""

from __future__ import annotations

import argparse
import logging

import yaml
from werkzeug.serving import run_simple

from .router import Config, Location, Router

CONFIG_PATH = "/etc/gateway/config.yaml"

logger = logging.getLogger(__name__)


def read_config(path: str) -> Config:
    """Read the ``locations`` mapping (prefix to ``{url: ...}``) from a YAML file."""
    with open(path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError("config must be a mapping")

    locations = raw.get("locations") or {}
    if not isinstance(locations, dict):
        raise ValueError("locations must be a mapping")

    config = Config()
    for prefix, location in locations.items():
        location = location or {}
        if not isinstance(location, dict):
            raise ValueError(f"location {prefix!r} must be a mapping")
        config.locations.append(Location(prefix=str(prefix), url=str(location.get("url", ""))))
    return config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Route requests to backend services.")
    parser.add_argument("--config", default=CONFIG_PATH, help="path to the YAML config")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=80, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        config = read_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as err:
        logger.error("failed to read config error=%s", err)
        return 1

    try:
        run_simple(args.host, args.port, Router(config, logger))
    except OSError as err:
        logger.error("serving http failed error=%s", err)
        return 1
    return 0