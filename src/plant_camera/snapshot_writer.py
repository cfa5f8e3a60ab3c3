from .exceptions import PersistError
from src.common import \
    ImageFormat, \
    ImageUtils, \
    IOUtils, \
    JPEG_QUALITY_DEFAULT, \
    SeverityLabel, \
    StatusMessageSource
import cv2
import datetime
import logging
import numpy
from pathlib import Path
from typing import Final


logger = logging.getLogger(__name__)

# Minute granularity: snapshots within the same minute share a name and overwrite each other
SNAPSHOT_TIMESTAMP_FORMAT: Final[str] = "%Y%m%d_%H%M"


class SnapshotRecord:

    path: Path
    content: bytes

    def __init__(
        self,
        path: Path,
        content: bytes
    ):
        self.path = path
        self.content = content

    @property
    def filename(self) -> str:
        return self.path.name


class SnapshotWriter:
    """
    A "class" to group related static functions, like in a namespace.
    The class itself is not meant to be instantiated.
    """

    def __init__(self):
        raise RuntimeError(f"{__class__.__name__} is not meant to be instantiated.")

    @staticmethod
    def build_path(
        output_dir: str,
        prefix: str,
        now: datetime.datetime
    ) -> Path:
        """
        :param now: local time of the snapshot
        :return: output_dir/[prefix-]YYYYMMDD_HHMM.jpg
        """
        filename: str = f"{now.strftime(SNAPSHOT_TIMESTAMP_FORMAT)}{ImageFormat.FORMAT_JPG}"
        if prefix:
            filename = f"{prefix}-{filename}"
        return Path(output_dir) / filename

    @staticmethod
    def persist(
        image: numpy.ndarray,
        path: Path,
        status_message_source: StatusMessageSource,
        jpeg_quality: int = JPEG_QUALITY_DEFAULT
    ) -> SnapshotRecord:
        """
        Encode image as JPEG and write it to path, creating parent directories as needed.
        :raises PersistError: if encoding, directory creation, or writing fails
        """
        status_message_source.enqueue_status_message(
            severity=SeverityLabel.INFO,
            message=f"Saving image to {path}.")

        content: bytes
        try:
            content = ImageUtils.image_to_bytes(
                image_data=image,
                image_format=ImageFormat.FORMAT_JPG,
                jpeg_quality=jpeg_quality)
        except (ValueError, cv2.error) as e:
            raise PersistError(f"Failed to encode picture: {e}") from e

        errors: list[str] = list()
        written: bool = IOUtils.bytes_write(
            filepath=str(path),
            data=content,
            on_error_for_user=errors.append,
            on_error_for_dev=errors.append)
        if not written:
            raise PersistError(f"Failed to save picture to {path}: {' '.join(errors)}")
        logger.debug(f"Wrote {len(content)} bytes to {path}.")
        return SnapshotRecord(path=path, content=content)
