from .exceptions import CropBoundsError
from .frame_capturer import CapturedFrame
from src.common import \
    ImageResolution, \
    ImageUtils
import numpy


class ImageProcessor:
    """
    A "class" to group related static functions, like in a namespace.
    The class itself is not meant to be instantiated.
    """

    def __init__(self):
        raise RuntimeError(f"{__class__.__name__} is not meant to be instantiated.")

    @staticmethod
    def crop(
        frame: CapturedFrame,
        x_px: int,
        y_px: int,
        width_px: int,
        height_px: int
    ) -> numpy.ndarray:
        """
        :return: image of exactly height_px rows and width_px columns
        :raises CropBoundsError: if the rectangle does not lie inside the frame
        """
        resolution: ImageResolution = frame.resolution
        if not resolution.contains_region(
            x_px=x_px,
            y_px=y_px,
            width_px=width_px,
            height_px=height_px
        ):
            raise CropBoundsError(
                f"Crop rectangle (x={x_px}, y={y_px}, width={width_px}, height={height_px}) "
                f"exceeds the {resolution} frame.")
        return ImageUtils.image_region(
            opencv_image=frame.image,
            x_px=x_px,
            y_px=y_px,
            width_px=width_px,
            height_px=height_px)
