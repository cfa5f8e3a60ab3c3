from .exceptions import DeviceNotFound
from src.common import \
    SeverityLabel, \
    StatusMessageSource
import cv2
import glob
import logging
import os
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field
import sys
from typing import Final


logger = logging.getLogger(__name__)

_LINUX_VIDEO_NODE_GLOB: Final[str] = "/dev/video*"
_LINUX_SYSFS_ROOT: Final[str] = "/sys/class/video4linux"
_PROBE_DEVICE_LIMIT: Final[int] = 16


class DeviceDescriptor(BaseModel):
    """
    One capture device as reported by a single enumeration.
    The index is only meaningful until the next enumeration.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    human_name: str = Field()
    misc: str = Field()  # Metadata matched against the configured camera identifier


class DeviceSelector:
    """
    A "class" to group related static functions, like in a namespace.
    The class itself is not meant to be instantiated.
    """

    def __init__(self):
        raise RuntimeError(f"{__class__.__name__} is not meant to be instantiated.")

    @staticmethod
    def enumerate() -> list[DeviceDescriptor]:
        """
        List currently attached capture devices. An empty list is not an error.
        """
        devices: list[DeviceDescriptor]
        if sys.platform == "linux":
            devices = DeviceSelector._enumerate_linux()
        else:
            devices = DeviceSelector._enumerate_opencv_probe()
        logger.info(f"{len(devices)} cameras detected.")
        return devices

    @staticmethod
    def select(
        devices: list[DeviceDescriptor],
        configured_id: str,
        fail_on_no_match: bool,
        status_message_source: StatusMessageSource
    ) -> int:
        """
        :return: index of the first device whose metadata contains configured_id (case-insensitive),
            otherwise 0 if fail_on_no_match is False
        :raises DeviceNotFound: if nothing matches and fail_on_no_match is True
        """
        needle: str = configured_id.lower()
        device: DeviceDescriptor
        for device in devices:
            if needle in device.misc.lower():
                status_message_source.enqueue_status_message(
                    severity=SeverityLabel.INFO,
                    message=f"Using camera {device.index} {device.human_name}.")
                return device.index

        if fail_on_no_match:
            message: str = f"Could not find camera with id {configured_id}, exiting..."
            status_message_source.enqueue_status_message(
                severity=SeverityLabel.ERROR,
                message=message)
            raise DeviceNotFound(
                f"Could not find camera with id {configured_id} among {len(devices)} device(s).",
                camera_id=configured_id)

        status_message_source.enqueue_status_message(
            severity=SeverityLabel.WARNING,
            message=f"Could not find camera with id {configured_id}, using camera with index 0.")
        return 0

    @staticmethod
    def _enumerate_linux() -> list[DeviceDescriptor]:
        devices: list[DeviceDescriptor] = list()
        for index in DeviceSelector._linux_video_node_indices():
            dev_path: str = f"/dev/video{index}"
            sysfs_name: str | None = DeviceSelector._read_sysfs_name(index)
            bus_path: str | None = DeviceSelector._read_sysfs_bus_path(index)
            human_name: str = sysfs_name or os.path.basename(dev_path)
            misc_parts: list[str] = [human_name, dev_path]
            if bus_path:
                misc_parts.append(bus_path)
            devices.append(DeviceDescriptor(
                index=index,
                human_name=human_name,
                misc=" ".join(misc_parts)))
        return devices

    @staticmethod
    def _enumerate_opencv_probe() -> list[DeviceDescriptor]:
        # No metadata is available through OpenCV alone, so stop at the first index that fails to open
        devices: list[DeviceDescriptor] = list()
        for index in range(_PROBE_DEVICE_LIMIT):
            capture: cv2.VideoCapture = cv2.VideoCapture(index)
            opened: bool = capture.isOpened()
            capture.release()
            if not opened:
                break
            human_name: str = f"Camera {index}"
            devices.append(DeviceDescriptor(
                index=index,
                human_name=human_name,
                misc=f"{human_name} index {index}"))
        return devices

    @staticmethod
    def _linux_video_node_indices() -> list[int]:
        # UVC metadata nodes also match and share the capture node's name; the lower-numbered capture node sorts first
        indices: list[int] = list()
        for path in glob.glob(_LINUX_VIDEO_NODE_GLOB):
            try:
                indices.append(int(Path(path).name.replace("video", "")))
            except ValueError:
                continue
        return sorted(indices)

    @staticmethod
    def _read_sysfs_name(index: int) -> str | None:
        sysfs_name: Path = Path(_LINUX_SYSFS_ROOT) / f"video{index}" / "name"
        try:
            text: str = sysfs_name.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return text or None

    @staticmethod
    def _read_sysfs_bus_path(index: int) -> str | None:
        # The resolved device link carries the bus topology, e.g. ".../usb1/1-2/1-2:1.0"
        device_link: Path = Path(_LINUX_SYSFS_ROOT) / f"video{index}" / "device"
        if not device_link.exists():
            return None
        try:
            return str(device_link.resolve())
        except OSError:
            return None
