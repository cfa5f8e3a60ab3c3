from .exceptions import \
    CaptureError, \
    DeviceOpenError
from src.common import \
    ImageResolution, \
    SeverityLabel, \
    StatusMessageSource
import cv2
import datetime
import logging
import numpy
import os
from typing import Callable, Final


logger = logging.getLogger(__name__)

_FOURCC_MJPG: Final[int] = cv2.VideoWriter_fourcc('M', 'J', 'P', 'G')


class CapturedFrame:
    """
    A single raster image (BGR, height x width x 3) as retrieved from a capture device.
    """

    image: numpy.ndarray
    captured_timestamp_utc: datetime.datetime

    def __init__(
        self,
        image: numpy.ndarray,
        captured_timestamp_utc: datetime.datetime
    ):
        self.image = image
        self.captured_timestamp_utc = captured_timestamp_utc

    @property
    def resolution(self) -> ImageResolution:
        return ImageResolution.from_image(self.image)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])


class CameraHandle:
    """
    An open capture device, exclusively owned by one run.
    """

    index: int
    capture: cv2.VideoCapture
    negotiated_resolution: ImageResolution
    negotiated_frame_rate: float

    def __init__(
        self,
        index: int,
        capture: cv2.VideoCapture,
        negotiated_resolution: ImageResolution,
        negotiated_frame_rate: float
    ):
        self.index = index
        self.capture = capture
        self.negotiated_resolution = negotiated_resolution
        self.negotiated_frame_rate = negotiated_frame_rate

    def __str__(self):
        return f"{self.negotiated_resolution}@{self.negotiated_frame_rate:g}fps MJPG"


def open_video_capture(index: int) -> cv2.VideoCapture:
    if os.name == "nt":
        return cv2.VideoCapture(index, cv2.CAP_DSHOW)
    elif os.name == "posix":
        return cv2.VideoCapture(index, cv2.CAP_V4L2)
    else:
        raise DeviceOpenError(f"The current platform ({os.name}) is not supported.")


class FrameCapturer:

    _status_message_source: StatusMessageSource
    _video_capture_factory: Callable[[int], cv2.VideoCapture]

    def __init__(
        self,
        status_message_source: StatusMessageSource,
        video_capture_factory: Callable[[int], cv2.VideoCapture] = open_video_capture
    ):
        self._status_message_source = status_message_source
        self._video_capture_factory = video_capture_factory

    def open(
        self,
        index: int,
        resolution: ImageResolution,
        frame_rate: int
    ) -> CameraHandle:
        """
        Open the device and request MJPG at the given resolution and frame rate. No renegotiation is attempted.
        :raises DeviceOpenError: if the device cannot be opened or does not accept MJPG at the given resolution
        """
        capture: cv2.VideoCapture = self._video_capture_factory(index)
        if capture is None or not capture.isOpened():
            if capture is not None:
                capture.release()
            raise DeviceOpenError(f"Failed to open capture device {index}.")

        capture.set(cv2.CAP_PROP_FOURCC, float(_FOURCC_MJPG))
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, float(resolution.x_px))
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, float(resolution.y_px))
        capture.set(cv2.CAP_PROP_FPS, float(frame_rate))

        # Some backends report 0 when the fourcc cannot be queried
        reported_fourcc: int = int(capture.get(cv2.CAP_PROP_FOURCC))
        if reported_fourcc not in (0, _FOURCC_MJPG):
            capture.release()
            raise DeviceOpenError(
                f"Capture device {index} does not support MJPG "
                f"(reported fourcc {FrameCapturer._fourcc_to_str(reported_fourcc)}).")

        handle: CameraHandle = CameraHandle(
            index=index,
            capture=capture,
            negotiated_resolution=ImageResolution(
                x_px=int(round(capture.get(cv2.CAP_PROP_FRAME_WIDTH))),
                y_px=int(round(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)))),
            negotiated_frame_rate=float(capture.get(cv2.CAP_PROP_FPS)))
        # OpenCV falls back to another mode without reporting an error
        if handle.negotiated_resolution != resolution:
            capture.release()
            raise DeviceOpenError(
                f"Capture device {index} does not support {resolution} "
                f"(negotiated {handle.negotiated_resolution}).")
        self._status_message_source.enqueue_status_message(
            severity=SeverityLabel.INFO,
            message=f"Camera format: {handle}.")
        return handle

    def capture_one(
        self,
        handle: CameraHandle
    ) -> CapturedFrame:
        """
        Block until a single frame is available.
        :raises CaptureError: if the frame could not be grabbed or retrieved
        """
        grabbed_frame: bool = handle.capture.grab()
        if not grabbed_frame:
            raise CaptureError(f"Failed to grab frame from capture device {handle.index}.")

        retrieved_frame: bool
        image: numpy.ndarray | None
        retrieved_frame, image = handle.capture.retrieve()
        if not retrieved_frame or image is None:
            raise CaptureError(f"Failed to retrieve frame from capture device {handle.index}.")

        frame: CapturedFrame = CapturedFrame(
            image=image,
            captured_timestamp_utc=datetime.datetime.now(tz=datetime.timezone.utc))
        logger.debug(f"Captured {frame.resolution} frame from capture device {handle.index}.")
        return frame

    @staticmethod
    def close(handle: CameraHandle) -> None:
        handle.capture.release()

    @staticmethod
    def _fourcc_to_str(fourcc: int) -> str:
        return "".join(chr((fourcc >> (8 * i)) & 0xFF) for i in range(4))
