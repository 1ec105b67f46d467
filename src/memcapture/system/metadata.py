"""
Run metadata attached to every report: device image, platform name,
network MAC, timestamp, capture duration and whether swap is enabled.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


class Metadata:
    """Collects descriptive information about the device under test."""

    def __init__(
        self,
        version_file: Path = Path("/version.txt"),
        device_properties: Path = Path("/etc/device.properties"),
        interface: str = "eth0",
    ):
        self.version_file = Path(version_file)
        self.device_properties = Path(device_properties)
        self.interface = interface
        self.duration = 0

    def set_duration(self, seconds: int) -> None:
        self.duration = seconds

    def image(self) -> str:
        """Image name from the ``imagename:`` line of /version.txt."""
        try:
            with open(self.version_file, "r") as f:
                lines = f.read().splitlines()
        except OSError:
            return UNKNOWN

        for line in lines:
            if line.startswith("imagename:"):
                value = line[len("imagename:"):].split()
                if value:
                    return value[0]
        return UNKNOWN

    def platform(self) -> str:
        """``FRIENDLY_ID`` from /etc/device.properties, quotes removed."""
        try:
            with open(self.device_properties, "r") as f:
                lines = f.read().splitlines()
        except OSError:
            return UNKNOWN

        for line in lines:
            field, sep, value = line.partition("=")
            if sep and field == "FRIENDLY_ID":
                return value.replace('"', "")
        return UNKNOWN

    def mac(self) -> str:
        try:
            addresses = psutil.net_if_addrs().get(self.interface, [])
        except OSError as e:
            logger.debug(f"Failed to query network interfaces: {e}")
            return UNKNOWN

        for address in addresses:
            if address.family == psutil.AF_LINK:
                return address.address
        return UNKNOWN

    @staticmethod
    def report_timestamp() -> str:
        return datetime.now().astimezone().strftime("%Y-%m-%dT%H:%M:%S%z")

    @staticmethod
    def swap_enabled() -> bool:
        return psutil.swap_memory().total > 0

    def to_dict(self, swap_enabled: Optional[bool] = None) -> Dict[str, Any]:
        return {
            "image": self.image(),
            "platform": self.platform(),
            "mac": self.mac(),
            "timestamp": self.report_timestamp(),
            "duration": self.duration,
            "swapEnabled": self.swap_enabled() if swap_enabled is None else swap_enabled,
        }
