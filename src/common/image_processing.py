import cv2
from enum import StrEnum
import numpy
from pydantic import BaseModel, Field
from typing import Final


JPEG_QUALITY_DEFAULT: Final[int] = 95


class ImageFormat(StrEnum):
    FORMAT_JPG = ".jpg"


class ImageResolution(BaseModel):
    x_px: int = Field()
    y_px: int = Field()

    def __eq__(self, other) -> bool:
        if type(self) is not type(other):
            return False
        return \
            self.x_px == other.x_px and \
            self.y_px == other.y_px

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self):
        return f"{self.x_px}x{self.y_px}"

    def contains_region(
        self,
        x_px: int,
        y_px: int,
        width_px: int,
        height_px: int
    ) -> bool:
        return \
            x_px >= 0 and y_px >= 0 and \
            width_px > 0 and height_px > 0 and \
            x_px + width_px <= self.x_px and \
            y_px + height_px <= self.y_px

    @staticmethod
    def from_image(image: numpy.ndarray) -> 'ImageResolution':
        # note: opencv height represented by 1st dimension
        return ImageResolution(x_px=int(image.shape[1]), y_px=int(image.shape[0]))


class ImageUtils:
    """
    A "class" to group related static functions, like in a namespace.
    The class itself is not meant to be instantiated.
    """

    def __init__(self):
        raise RuntimeError(f"{__class__.__name__} is not meant to be instantiated.")

    @staticmethod
    def black_image(
        resolution_px: tuple[int, int],
    ) -> numpy.ndarray:
        return numpy.zeros((resolution_px[1], resolution_px[0], 3), dtype=numpy.uint8)

    @staticmethod
    def image_region(
        opencv_image: numpy.ndarray,
        x_px: int,
        y_px: int,
        width_px: int,
        height_px: int
    ) -> numpy.ndarray:
        """
        Extract a rectangular region without resampling.
        The caller is responsible for the region lying inside the image.
        :return: A contiguous copy, so the source frame can be released independently.
        """
        return numpy.ascontiguousarray(opencv_image[y_px:y_px + height_px, x_px:x_px + width_px])

    @staticmethod
    def image_to_bytes(
        image_data: numpy.ndarray,
        image_format: ImageFormat = ImageFormat.FORMAT_JPG,
        jpeg_quality: int = JPEG_QUALITY_DEFAULT
    ) -> bytes:
        """
        :param image_data: OpenCV image (numpy.ndarray, BGR)
        :param image_format: e.g. ".jpg"
        :param jpeg_quality: 1-100
        :return: encoded bytes
        :raises ValueError: if the codec rejects the image
        """
        parameters: list[int] = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]
        encoded: bool
        encoded_image_single_row: numpy.ndarray
        encoded, encoded_image_single_row = cv2.imencode(str(image_format), image_data, parameters)
        if not encoded:
            raise ValueError(f"Failed to encode image as {image_format}.")
        return encoded_image_single_row.tobytes()
