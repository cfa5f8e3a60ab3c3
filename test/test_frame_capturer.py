from src.common import \
    ImageResolution, \
    ImageUtils, \
    StatusMessageSource
from src.plant_camera import \
    CameraHandle, \
    CaptureError, \
    CapturedFrame, \
    DeviceOpenError, \
    FrameCapturer
import cv2
import numpy
from typing import Final
from unittest import TestCase


FOURCC_MJPG: Final[int] = cv2.VideoWriter_fourcc('M', 'J', 'P', 'G')
FOURCC_YUYV: Final[int] = cv2.VideoWriter_fourcc('Y', 'U', 'Y', 'V')


class FakeVideoCapture:
    """
    Stands in for cv2.VideoCapture, echoing back whatever properties are set.
    """

    def __init__(
        self,
        image: numpy.ndarray | None = None,
        opened: bool = True,
        reported_fourcc: int | None = None,
        reported_resolution: tuple[int, int] | None = None,
        grab_succeeds: bool = True,
        retrieve_succeeds: bool = True
    ):
        self.image = image
        self.opened = opened
        self.reported_fourcc = reported_fourcc
        self.reported_resolution = reported_resolution
        self.grab_succeeds = grab_succeeds
        self.retrieve_succeeds = retrieve_succeeds
        self.properties: dict[int, float] = dict()
        self.released: bool = False

    def isOpened(self) -> bool:
        return self.opened

    def set(self, property_id: int, value: float) -> bool:
        self.properties[property_id] = value
        return True

    def get(self, property_id: int) -> float:
        if property_id == cv2.CAP_PROP_FOURCC and self.reported_fourcc is not None:
            return float(self.reported_fourcc)
        if self.reported_resolution is not None:
            if property_id == cv2.CAP_PROP_FRAME_WIDTH:
                return float(self.reported_resolution[0])
            if property_id == cv2.CAP_PROP_FRAME_HEIGHT:
                return float(self.reported_resolution[1])
        return self.properties.get(property_id, 0.0)

    def grab(self) -> bool:
        return self.grab_succeeds

    def retrieve(self) -> tuple[bool, numpy.ndarray | None]:
        if not self.retrieve_succeeds:
            return False, None
        return True, self.image.copy()

    def release(self) -> None:
        self.released = True


class TestFrameCapturer(TestCase):

    def setUp(self) -> None:
        self.status_message_source = StatusMessageSource(source_label="test", send_to_logger=False)
        self.opened_indices: list[int] = list()

    def capturer_for(self, video_capture: FakeVideoCapture) -> FrameCapturer:
        def factory(index: int) -> FakeVideoCapture:
            self.opened_indices.append(index)
            return video_capture
        return FrameCapturer(
            status_message_source=self.status_message_source,
            video_capture_factory=factory)

    def test_open_requests_mjpg_resolution_and_frame_rate(self):
        video_capture: FakeVideoCapture = FakeVideoCapture()
        handle: CameraHandle = self.capturer_for(video_capture).open(
            index=3,
            resolution=ImageResolution(x_px=1280, y_px=720),
            frame_rate=15)
        self.assertEqual(self.opened_indices, [3])
        self.assertEqual(video_capture.properties[cv2.CAP_PROP_FOURCC], float(FOURCC_MJPG))
        self.assertEqual(video_capture.properties[cv2.CAP_PROP_FRAME_WIDTH], 1280.0)
        self.assertEqual(video_capture.properties[cv2.CAP_PROP_FRAME_HEIGHT], 720.0)
        self.assertEqual(video_capture.properties[cv2.CAP_PROP_FPS], 15.0)
        self.assertEqual(handle.index, 3)
        self.assertEqual(handle.negotiated_resolution, ImageResolution(x_px=1280, y_px=720))
        self.assertEqual(handle.negotiated_frame_rate, 15.0)

    def test_open_failure(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(opened=False)
        with self.assertRaises(DeviceOpenError):
            self.capturer_for(video_capture).open(
                index=0,
                resolution=ImageResolution(x_px=640, y_px=480),
                frame_rate=30)
        self.assertTrue(video_capture.released)

    def test_open_rejects_other_pixel_format(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(reported_fourcc=FOURCC_YUYV)
        with self.assertRaises(DeviceOpenError) as context:
            self.capturer_for(video_capture).open(
                index=0,
                resolution=ImageResolution(x_px=640, y_px=480),
                frame_rate=30)
        self.assertIn("YUYV", context.exception.message)
        self.assertTrue(video_capture.released)

    def test_open_rejects_other_resolution(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(reported_resolution=(1280, 720))
        with self.assertRaises(DeviceOpenError) as context:
            self.capturer_for(video_capture).open(
                index=0,
                resolution=ImageResolution(x_px=640, y_px=480),
                frame_rate=30)
        self.assertIn("640x480", context.exception.message)
        self.assertIn("1280x720", context.exception.message)
        self.assertTrue(video_capture.released)

    def test_open_accepts_unreported_pixel_format(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(reported_fourcc=0)
        handle: CameraHandle = self.capturer_for(video_capture).open(
            index=0,
            resolution=ImageResolution(x_px=640, y_px=480),
            frame_rate=30)
        self.assertFalse(video_capture.released)
        FrameCapturer.close(handle=handle)
        self.assertTrue(video_capture.released)

    def test_capture_one(self):
        image: numpy.ndarray = ImageUtils.black_image(resolution_px=(640, 480))
        image[10, 20] = (1, 2, 3)
        video_capture: FakeVideoCapture = FakeVideoCapture(image=image)
        capturer: FrameCapturer = self.capturer_for(video_capture)
        handle: CameraHandle = capturer.open(
            index=0,
            resolution=ImageResolution(x_px=640, y_px=480),
            frame_rate=30)
        frame: CapturedFrame = capturer.capture_one(handle=handle)
        self.assertEqual((frame.width, frame.height), (640, 480))
        self.assertEqual(frame.resolution, ImageResolution(x_px=640, y_px=480))
        self.assertEqual(tuple(frame.image[10, 20]), (1, 2, 3))

    def test_capture_grab_failure(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(grab_succeeds=False)
        capturer: FrameCapturer = self.capturer_for(video_capture)
        handle: CameraHandle = capturer.open(
            index=0,
            resolution=ImageResolution(x_px=640, y_px=480),
            frame_rate=30)
        with self.assertRaises(CaptureError):
            capturer.capture_one(handle=handle)

    def test_capture_retrieve_failure(self):
        video_capture: FakeVideoCapture = FakeVideoCapture(retrieve_succeeds=False)
        capturer: FrameCapturer = self.capturer_for(video_capture)
        handle: CameraHandle = capturer.open(
            index=0,
            resolution=ImageResolution(x_px=640, y_px=480),
            frame_rate=30)
        with self.assertRaises(CaptureError):
            capturer.capture_one(handle=handle)
