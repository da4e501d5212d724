import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urlparse

from pydantic import ValidationError

from .constants import (
    DEFAULT_APP,
    DEFAULT_HOSTS_PATH,
    DEFAULT_TIMEOUT,
    DEFAULT_ZK_PORT,
    ENV_APP,
    ENV_HOSTS_PATH,
    ENV_ZK_HOST,
    ENV_ZK_PORT,
    ENV_ZK_TIMEOUT,
    ENV_ZK_URL,
)
from .errors import ConfigError
from .schemas import CoordinationConfigValidator


def resolve_setting(
    arg: Any,
    env_keys: Union[str, List[str]],
    config: Optional[Dict[str, Any]],
    config_key: str,
    default: Any,
    cast: Optional[Callable[[Any], Any]] = None
) -> Any:
    """
    First of: the argument, the first set environment variable, the config
    entry, the default. A value cast cannot convert is returned unchanged so
    that validate() reports it.
    """
    if arg is not None:
        value = arg
    else:
        keys = [env_keys] if isinstance(env_keys, str) else env_keys
        value = next((os.environ[k] for k in keys if k in os.environ), None)
        if value is None:
            value = (config or {}).get(config_key, default)

    if cast is None:
        return value
    try:
        return cast(value)
    except (ValueError, TypeError):
        return value


@dataclass
class CoordinationConfig:
    """
    Settings for the ZooKeeper session and tree layout.
    Resolves parameters from source of truth in order:
    1. Direct constructor arguments
    2. Environment variables
    3. Config dictionary
    4. Default values
    """
    host: str = field(default="localhost")
    port: int = field(default=DEFAULT_ZK_PORT)
    timeout: float = field(default=DEFAULT_TIMEOUT)
    hosts_path: str = field(default=DEFAULT_HOSTS_PATH)
    app: str = field(default=DEFAULT_APP)

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        timeout: Optional[float] = None,
        hosts_path: Optional[str] = None,
        app: Optional[str] = None,
    ):
        self.host = resolve_setting(host, ENV_ZK_HOST, config, "host", "localhost")
        self.port = resolve_setting(port, ENV_ZK_PORT, config, "port", DEFAULT_ZK_PORT, int)
        self.timeout = resolve_setting(timeout, ENV_ZK_TIMEOUT, config, "timeout", DEFAULT_TIMEOUT, float)
        self.hosts_path = resolve_setting(hosts_path, ENV_HOSTS_PATH, config, "hosts_path", DEFAULT_HOSTS_PATH)
        self.app = resolve_setting(app, ENV_APP, config, "app", DEFAULT_APP)

        # CONFIG_TREE_ZK_URL only fills in what the caller didn't pass
        zk_url = os.getenv(ENV_ZK_URL)
        if zk_url and host is None and port is None:
            self._parse_zk_url(zk_url)

        self.validate()

    def _parse_zk_url(self, url: str) -> None:
        """Parse zk://host:port."""
        parsed = urlparse(url)
        if parsed.scheme not in ("zk", "zookeeper"):
            raise ConfigError(f"Unsupported ZooKeeper URL scheme: {url}")
        if parsed.hostname:
            self.host = parsed.hostname
        try:
            if parsed.port:
                self.port = parsed.port
        except ValueError as e:
            raise ConfigError(f"Invalid port in ZooKeeper URL {url}: {e}")

    def validate(self) -> None:
        try:
            validated = CoordinationConfigValidator(**self.__dict__)
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}")
        self.port = validated.port
        self.timeout = validated.timeout

    @property
    def hosts(self) -> str:
        """Connection string accepted by KazooClient."""
        return f"{self.host}:{self.port}"
