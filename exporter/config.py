"""
Configuration for the pySolix Prometheus exporter

Settings are read from three places, highest priority first:

    1. Environment variables prefixed with ANKER_SOLIX_ (a .env file in the
       working directory is loaded into the environment first, without
       overriding variables that are already set)
    2. A JSON object passed on the command line:
           python -m exporter --config '{"username": "me@example.com", "site_ids": ["abc"]}'
    3. Defaults

Environment Variables:

    ANKER_SOLIX_ADDRESS      - Bind address host:port (default: "127.0.0.1:8080")
    ANKER_SOLIX_USERNAME     - Anker account email (required)
    ANKER_SOLIX_PASSWORD     - Anker account password (required)
    ANKER_SOLIX_COUNTRY      - Country code of the account (default: "DE")
    ANKER_SOLIX_TIMEZONE     - Timezone of the sites (default: "Europe/Berlin")
    ANKER_SOLIX_CACHE_FILE   - Token cache file (default: "token_cache.json")
    ANKER_SOLIX_SITE_IDS     - Comma separated site ids (default: discover all sites)
    ANKER_SOLIX_TIMEOUT      - Cloud request timeout in seconds (default: 10)
    ANKER_SOLIX_SERVE_STALE  - Serve last known metrics when a refresh fails "yes"/"no" (default: "no")
    ANKER_SOLIX_DEBUG        - Enable debug logging "yes"/"no" (default: "no")
"""
import argparse
import json
import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from dotenv import find_dotenv, load_dotenv

from pysolix import CACHEFILE, ConfigError

log = logging.getLogger(__name__)

ENV_PREFIX = "ANKER_SOLIX_"
DEFAULT_ADDRESS = "127.0.0.1:8080"
KEYS = ["address", "username", "password", "country", "timezone", "cache_file",
        "site_ids", "timeout", "serve_stale", "debug"]
SECRET_KEYS = ["password"]


def parse_address(value: str) -> Tuple[str, int]:
    host, sep, port = str(value).rpartition(":")
    if not sep:
        raise ConfigError(f"Invalid address {value!r} - expected host:port")
    try:
        port = int(port)
    except ValueError:
        raise ConfigError(f"Invalid port in address {value!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"Invalid port in address {value!r}")
    return host.strip("[]"), port


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("yes", "true", "1", "on")


def parse_site_ids(value) -> List[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in str(value).split(",") if v.strip()]


@dataclass
class Config:
    address: Tuple[str, int] = field(default_factory=lambda: parse_address(DEFAULT_ADDRESS))
    username: str = ""
    password: str = ""
    country: str = "DE"
    timezone: str = "Europe/Berlin"
    cache_file: str = CACHEFILE
    site_ids: List[str] = field(default_factory=list)
    timeout: int = 10
    serve_stale: bool = False
    debug: bool = False

    @classmethod
    def from_values(cls, values: Mapping) -> "Config":
        config = cls()
        if "address" in values:
            config.address = parse_address(values["address"])
        for key in ("username", "password", "country", "timezone", "cache_file"):
            if key in values:
                setattr(config, key, str(values[key]))
        if "site_ids" in values:
            config.site_ids = parse_site_ids(values["site_ids"])
        if "timeout" in values:
            try:
                config.timeout = int(values["timeout"])
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid timeout {values['timeout']!r}") from None
        if "serve_stale" in values:
            config.serve_stale = parse_bool(values["serve_stale"])
        if "debug" in values:
            config.debug = parse_bool(values["debug"])
        return config

    def validate(self) -> "Config":
        if not self.username or not self.password:
            raise ConfigError(f"Missing {ENV_PREFIX}USERNAME or {ENV_PREFIX}PASSWORD")
        if self.timeout <= 0:
            raise ConfigError("Timeout must be a positive number of seconds")
        return self

    def masked(self) -> dict:
        values = dict(self.__dict__)
        values["address"] = "%s:%d" % self.address
        for key in SECRET_KEYS:
            values[key] = '*' * len(values[key]) if values[key] else None
        return values


def load_config(args: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None,
                dotenv: bool = True) -> Config:
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    if environ is None:
        environ = os.environ

    parser = argparse.ArgumentParser(prog="exporter", description="Anker Solix Prometheus exporter")
    parser.add_argument("--config", type=str, default="{}", help="JSON object with settings")
    opts = parser.parse_args(args)

    try:
        blob = json.loads(opts.config)
    except ValueError as exc:
        raise ConfigError(f"Invalid JSON configuration: {exc}") from None
    if not isinstance(blob, dict):
        raise ConfigError("JSON configuration must be an object")
    for key in blob:
        if key not in KEYS:
            log.warning(f"Ignoring unknown configuration key {key!r}")

    values = {}
    for key in KEYS:
        env = environ.get(ENV_PREFIX + key.upper())
        if env is not None:
            values[key] = env
        elif key in blob:
            values[key] = blob[key]
    return Config.from_values(values).validate()
