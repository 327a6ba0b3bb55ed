from __future__ import annotations

import logging
import subprocess

from batadv_exporter.config import CollectorConfig
from batadv_exporter.logging_utils import TRACE_LEVEL

logger = logging.getLogger(__name__)


class SourceUnavailableError(Exception):
    """batctl could not be run, or did not finish cleanly."""

    def __init__(self, device: str, reason: str) -> None:
        super().__init__(f"batctl statistics unavailable for {device}: {reason}")
        self.device = device
        self.reason = reason


def parse_statistics(output: str) -> dict[str, float]:
    """Turn the ``key: value`` report of ``batctl s`` into a mapping.

    Blank lines and lines that do not hold exactly one key and one value
    are ignored. A value that is not a number drops only its own line.
    """
    statistics: dict[str, float] = {}
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        parts = stripped.split(":", 1)
        if len(parts) != 2:
            continue
        key, value = parts[0].strip(), parts[1].strip()
        try:
            statistics[key] = float(value)
        except ValueError:
            logger.debug("Skipping malformed batctl line: %r", stripped)
    return statistics


class BatctlClient:
    def __init__(self, config: CollectorConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    def command(self, device: str) -> list[str]:
        return [self.config.batctl_path, "-m", device, "s"]

    def collect(self, device: str) -> dict[str, float]:
        return parse_statistics(self.run(device))

    def run(self, device: str) -> str:
        command = self.command(device)
        try:
            result = subprocess.run(
                command,
                check=False,
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise SourceUnavailableError(
                device, f"timed out after {self.config.command_timeout_s}s"
            ) from None
        except OSError as e:
            raise SourceUnavailableError(device, str(e)) from e

        if result.returncode != 0:
            if result.stderr:
                self.logger.log(TRACE_LEVEL, "stderr: %s", result.stderr.strip())
            raise SourceUnavailableError(
                device, f"exit status {result.returncode}"
            )
        self.logger.log(TRACE_LEVEL, "%s: %s", " ".join(command), result.stdout)
        return result.stdout
