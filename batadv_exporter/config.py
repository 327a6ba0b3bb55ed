from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import configparser

DEFAULT_LISTEN_ADDRESS = "::1"
DEFAULT_PORT = 12345
DEFAULT_BATCTL_PATH = "batctl"
DEFAULT_SYSFS_ROOT = "/sys/class/net"
DEFAULT_COMMAND_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class ServerConfig:
    listen_address: str
    port: int


@dataclass(frozen=True)
class CollectorConfig:
    batctl_path: str
    sysfs_root: str
    # Values <= 0 wait for batctl indefinitely
    command_timeout_s: float

    @property
    def timeout(self) -> float | None:
        return self.command_timeout_s if self.command_timeout_s > 0 else None


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig
    collector: CollectorConfig
    devices: list[str]


def _get_list(value: str | None) -> list[str]:
    if value is None:
        return []
    return unique([item.strip() for item in value.split(",") if item.strip()])


def unique(items: list[str]) -> list[str]:
    """Drop repeated entries, keeping the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def load_config(path: str | Path | None = None) -> AppConfig:
    parser = configparser.ConfigParser()
    if path is not None:
        read_files = parser.read(path)
        if not read_files:
            raise FileNotFoundError(f"Config file not found: {path}")

    # Every section is optional, so go through parser.get with a fallback
    server = ServerConfig(
        listen_address=parser.get("server", "listen_address", fallback=DEFAULT_LISTEN_ADDRESS),
        port=parser.getint("server", "port", fallback=DEFAULT_PORT),
    )

    collector = CollectorConfig(
        batctl_path=parser.get("collector", "batctl_path", fallback=DEFAULT_BATCTL_PATH),
        sysfs_root=parser.get("collector", "sysfs_root", fallback=DEFAULT_SYSFS_ROOT),
        command_timeout_s=parser.getfloat(
            "collector", "command_timeout_s", fallback=DEFAULT_COMMAND_TIMEOUT_S
        ),
    )

    devices = _get_list(parser.get("devices", "interfaces", fallback=None))

    return AppConfig(server=server, collector=collector, devices=devices)
