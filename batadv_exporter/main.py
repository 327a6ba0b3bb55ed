from __future__ import annotations

import argparse
import logging
import shutil
import sys

import psutil

from batadv_exporter.batctl import BatctlClient
from batadv_exporter.config import AppConfig, CollectorConfig, load_config, unique
from batadv_exporter.device import DeviceStatistics
from batadv_exporter.logging_utils import configure_logging, resolve_log_level
from batadv_exporter.refresh import RefreshOrchestrator
from batadv_exporter.registry import MetricRegistry
from batadv_exporter.server import ExpositionServer
from batadv_exporter.sysfs import MeshSettingsReader

logger = logging.getLogger("batadv_exporter")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prometheus exporter for batman-adv interfaces")
    parser.add_argument(
        "interfaces",
        nargs="*",
        metavar="BATMAN_IFACE",
        help="batman-adv interface(s) to monitor, e.g. bat0",
    )
    parser.add_argument(
        "--config",
        help="Path to CFG configuration file",
    )
    parser.add_argument(
        "--listen",
        help="Address to listen on (default: ::1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (default: 12345)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Refresh once, print the metrics to stdout and exit",
    )
    return parser


def resolve_devices(args: argparse.Namespace, config: AppConfig) -> list[str]:
    if args.interfaces:
        return unique(args.interfaces)
    return config.devices


def check_interfaces(devices: list[str]) -> None:
    # net_if_stats() can fail with OSError in containers without proper network support
    try:
        known = psutil.net_if_stats()
    except OSError:
        logger.debug("Failed to get network interface stats.")
        return
    for device in devices:
        if device not in known:
            logger.warning("Interface %s does not exist (yet); its metrics stay empty until it does.", device)


def build_orchestrator(devices: list[str], config: CollectorConfig) -> RefreshOrchestrator:
    registry = MetricRegistry()
    batctl = BatctlClient(config)
    settings = MeshSettingsReader(config.sysfs_root)
    records = [DeviceStatistics(device, registry, batctl, settings) for device in devices]
    return RefreshOrchestrator(registry, records)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    level = resolve_log_level(args.verbose, args.log_level)
    configure_logging(level)
    config = load_config(args.config)

    devices = resolve_devices(args, config)
    if not devices:
        parser.error("no batman-adv interface given")

    if shutil.which(config.collector.batctl_path) is None:
        logger.error("%s not found in path.", config.collector.batctl_path)
        sys.exit(1)

    check_interfaces(devices)
    orchestrator = build_orchestrator(devices, config.collector)

    if args.once:
        sys.stdout.write(orchestrator.scrape().decode("utf-8"))
        return

    address = (
        args.listen if args.listen is not None else config.server.listen_address,
        args.port if args.port is not None else config.server.port,
    )
    server = ExpositionServer(address, orchestrator)
    logger.info(
        "Exporting %s on [%s]:%s.", ", ".join(devices), address[0], server.port
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("batadv exporter stopped.")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
