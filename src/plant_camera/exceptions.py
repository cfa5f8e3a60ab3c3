from src.common import PlantCameraError


class ConfigError(PlantCameraError):
    """Configuration file is missing, malformed, or fails validation."""


class DeviceNotFound(PlantCameraError):
    """No capture device matches the configured identifier and fallback is disabled."""

    camera_id: str

    def __init__(self, message: str, *args, camera_id: str = ""):
        super().__init__(message, *args)
        self.camera_id = camera_id


class DeviceOpenError(PlantCameraError):
    """The capture device could not be opened in the requested format."""


class CaptureError(PlantCameraError):
    """No frame could be read from an open capture device."""


class CropBoundsError(PlantCameraError):
    """The crop rectangle does not fit inside the frame."""


class PersistError(PlantCameraError):
    """The snapshot could not be encoded or written to local storage."""


class UploadError(PlantCameraError):
    """The snapshot could not be read back or uploaded to object storage."""
