from src.plant_camera import \
    CapturedFrame, \
    CropBoundsError, \
    ImageProcessor
import datetime
import numpy
from unittest import TestCase


def gradient_frame(width_px: int, height_px: int) -> CapturedFrame:
    # Distinct value per pixel and channel, so any offset error shows up
    image: numpy.ndarray = numpy.zeros((height_px, width_px, 3), dtype=numpy.uint8)
    image[:, :, 0] = (numpy.arange(width_px) % 256)[numpy.newaxis, :]
    image[:, :, 1] = (numpy.arange(height_px) % 256)[:, numpy.newaxis]
    image[:, :, 2] = ((numpy.arange(width_px)[numpy.newaxis, :] + numpy.arange(height_px)[:, numpy.newaxis]) % 256)
    return CapturedFrame(image=image, captured_timestamp_utc=datetime.datetime.now(tz=datetime.timezone.utc))


class TestImageProcessor(TestCase):

    def test_crop_dimensions_and_content(self):
        frame: CapturedFrame = gradient_frame(640, 480)
        rectangles: list[tuple[int, int, int, int]] = [
            (0, 0, 640, 480),
            (0, 0, 1, 1),
            (100, 50, 200, 120),
            (639, 479, 1, 1),
            (320, 0, 320, 480)]
        for x, y, w, h in rectangles:
            cropped: numpy.ndarray = ImageProcessor.crop(frame=frame, x_px=x, y_px=y, width_px=w, height_px=h)
            self.assertEqual(cropped.shape, (h, w, 3), msg=str((x, y, w, h)))
            self.assertTrue(numpy.array_equal(cropped, frame.image[y:y + h, x:x + w]), msg=str((x, y, w, h)))

    def test_crop_is_independent_of_source(self):
        frame: CapturedFrame = gradient_frame(64, 48)
        cropped: numpy.ndarray = ImageProcessor.crop(frame=frame, x_px=8, y_px=8, width_px=16, height_px=16)
        frame.image[:, :, :] = 0
        self.assertTrue(numpy.any(cropped != 0))

    def test_crop_out_of_bounds(self):
        frame: CapturedFrame = gradient_frame(640, 480)
        rectangles: list[tuple[int, int, int, int]] = [
            (100, 100, 700, 700),
            (1, 0, 640, 480),
            (0, 1, 640, 480),
            (-1, 0, 10, 10),
            (0, 0, 0, 10)]
        for x, y, w, h in rectangles:
            with self.assertRaises(CropBoundsError, msg=str((x, y, w, h))):
                ImageProcessor.crop(frame=frame, x_px=x, y_px=y, width_px=w, height_px=h)
