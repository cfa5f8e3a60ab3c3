from .configuration import \
    ConfigResolver, \
    DEFAULT_CONFIGURATION_FILEPATH, \
    PlantCameraConfiguration
from .device_selector import \
    DeviceDescriptor, \
    DeviceSelector
from .exceptions import \
    CaptureError, \
    ConfigError, \
    CropBoundsError, \
    DeviceNotFound, \
    DeviceOpenError, \
    PersistError, \
    UploadError
from .frame_capturer import \
    CameraHandle, \
    CapturedFrame, \
    FrameCapturer
from .image_processor import \
    ImageProcessor
from .object_publisher import \
    create_s3_client, \
    ObjectPublisher, \
    SNAPSHOT_CONTENT_TYPE
from .pipeline import \
    PipelineFailure, \
    PipelineResult, \
    PipelineState, \
    PipelineSuccess, \
    SnapshotPipeline
from .snapshot_writer import \
    SnapshotRecord, \
    SnapshotWriter
