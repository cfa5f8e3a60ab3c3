from .exceptions import \
    PlantCameraError
from .image_processing import \
    ImageFormat, \
    ImageResolution, \
    ImageUtils, \
    JPEG_QUALITY_DEFAULT
from .io_utils import \
    IOUtils
from .status_messages import \
    SeverityLabel, \
    StatusMessage, \
    StatusMessageSource
