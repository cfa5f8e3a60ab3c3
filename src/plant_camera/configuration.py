from .exceptions import ConfigError
from src.common import \
    ImageResolution, \
    IOUtils, \
    JPEG_QUALITY_DEFAULT, \
    SeverityLabel, \
    StatusMessageSource
import logging
import os
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from typing import Final


logger = logging.getLogger(__name__)

DEFAULT_CONFIGURATION_FILEPATH: Final[str] = "plant_camera_config.json"
R2_ENDPOINT_URL_FORMAT: Final[str] = "https://{account_id}.r2.cloudflarestorage.com"
_MASKED_VALUE: Final[str] = "********"


class PlantCameraConfiguration(BaseModel):
    """
    Top-level schema for a snapshot run. Immutable once loaded.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    camera_id: str = Field(default="")  # Case-insensitive substring of the device metadata
    camera_width: int = Field(default=640, gt=0)
    camera_height: int = Field(default=480, gt=0)
    camera_frame_rate: int = Field(default=30, gt=0)
    no_default_camera: bool = Field(default=True)

    crop_x: int = Field(default=0, ge=0)
    crop_y: int = Field(default=0, ge=0)
    crop_width: int = Field(default=640, gt=0)
    crop_height: int = Field(default=480, gt=0)

    output_dir: str = Field(default="pictures")
    output_prefix: str = Field(default="")
    jpeg_quality: int = Field(default=JPEG_QUALITY_DEFAULT, ge=1, le=100)

    r2_account_id: str = Field(default="")
    r2_bucket_name: str = Field(default="")
    r2_access_key_id: str = Field(default="")
    r2_secret_access_key: str = Field(default="")
    r2_project_prefix: str = Field(default="plant-cam/")
    r2_endpoint_url: str | None = Field(default=None)  # None means derive from r2_account_id
    r2_region: str = Field(default="auto")

    @model_validator(mode="after")
    def crop_fits_capture_resolution(self) -> 'PlantCameraConfiguration':
        if not self.capture_resolution().contains_region(
            x_px=self.crop_x,
            y_px=self.crop_y,
            width_px=self.crop_width,
            height_px=self.crop_height
        ):
            raise ValueError(
                f"Crop rectangle (x={self.crop_x}, y={self.crop_y}, "
                f"width={self.crop_width}, height={self.crop_height}) "
                f"does not fit inside the capture resolution {self.capture_resolution()}.")
        return self

    def capture_resolution(self) -> ImageResolution:
        return ImageResolution(x_px=self.camera_width, y_px=self.camera_height)

    def endpoint_url(self) -> str:
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return R2_ENDPOINT_URL_FORMAT.format(account_id=self.r2_account_id)

    def masked_dump(self) -> dict:
        dumped: dict = self.model_dump()
        if dumped["r2_secret_access_key"]:
            dumped["r2_secret_access_key"] = _MASKED_VALUE
        return dumped


class ConfigResolver:
    """
    A "class" to group related static functions, like in a namespace.
    The class itself is not meant to be instantiated.
    """

    def __init__(self):
        raise RuntimeError(f"{__class__.__name__} is not meant to be instantiated.")

    @staticmethod
    def load(
        filepath: str,
        status_message_source: StatusMessageSource
    ) -> PlantCameraConfiguration:
        """
        Read and validate the configuration at filepath. Absent keys take their defaults.
        :raises ConfigError: if the file is missing, unreadable, malformed, or invalid
        """
        errors: list[str] = list()
        configuration_dict: dict | None = IOUtils.hjson_read(
            filepath=filepath,
            on_error_for_user=errors.append,
            on_error_for_dev=logger.debug)
        if configuration_dict is None:
            raise ConfigError(f"Could not load configuration from {filepath}: {' '.join(errors)}")

        configuration: PlantCameraConfiguration
        try:
            configuration = PlantCameraConfiguration(**configuration_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {filepath}: {e}") from e

        status_message_source.enqueue_status_message(
            severity=SeverityLabel.INFO,
            message=f"Loaded configuration from {filepath}: {configuration.masked_dump()}")
        return configuration

    @staticmethod
    def write_default(
        filepath: str
    ) -> None:
        """
        Write a configuration file holding every default value.
        Existing files are left untouched.
        :raises ConfigError: if the file exists or could not be written
        """
        if os.path.exists(filepath):
            raise ConfigError(f"Refusing to overwrite existing configuration at {filepath}.")
        errors: list[str] = list()
        written: bool = IOUtils.json_write(
            filepath=filepath,
            json_dict=PlantCameraConfiguration().model_dump(),
            on_error_for_user=errors.append,
            on_error_for_dev=logger.debug)
        if not written:
            raise ConfigError(f"Could not write default configuration to {filepath}: {' '.join(errors)}")
        logger.info(f"Wrote default configuration to {filepath}.")
