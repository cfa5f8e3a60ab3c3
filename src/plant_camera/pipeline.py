from .configuration import \
    ConfigResolver, \
    PlantCameraConfiguration
from .device_selector import \
    DeviceDescriptor, \
    DeviceSelector
from .frame_capturer import \
    CameraHandle, \
    CapturedFrame, \
    FrameCapturer
from .image_processor import ImageProcessor
from .object_publisher import ObjectPublisher
from .snapshot_writer import \
    SnapshotRecord, \
    SnapshotWriter
from src.common import \
    PlantCameraError, \
    SeverityLabel, \
    StatusMessageSource
import datetime
from enum import StrEnum
import numpy
from pathlib import Path
from typing import Callable, Final, TypeVar


T = TypeVar("T")


class PipelineState(StrEnum):
    START = "Start"
    CONFIG_LOADED = "ConfigLoaded"
    DEVICE_SELECTED = "DeviceSelected"
    STREAM_OPENED = "StreamOpened"
    FRAME_CAPTURED = "FrameCaptured"
    CROPPED = "Cropped"
    PERSISTED = "Persisted"
    PUBLISHED = "Published"
    DONE = "Done"
    FAILED = "Failed"


class PipelineSuccess:
    EXIT_CODE: Final[int] = 0

    snapshot: SnapshotRecord
    upload_key: str

    def __init__(
        self,
        snapshot: SnapshotRecord,
        upload_key: str
    ):
        self.snapshot = snapshot
        self.upload_key = upload_key

    @property
    def exit_code(self) -> int:
        return PipelineSuccess.EXIT_CODE


class PipelineFailure:
    EXIT_CODE: Final[int] = 1

    last_completed_state: PipelineState
    failed_stage: PipelineState  # The state that could not be reached
    error: PlantCameraError

    def __init__(
        self,
        last_completed_state: PipelineState,
        failed_stage: PipelineState,
        error: PlantCameraError
    ):
        self.last_completed_state = last_completed_state
        self.failed_stage = failed_stage
        self.error = error

    @property
    def exit_code(self) -> int:
        return PipelineFailure.EXIT_CODE


PipelineResult = PipelineSuccess | PipelineFailure


class SnapshotPipeline:
    """
    Runs one snapshot from configuration to upload, strictly in order:
    Start -> ConfigLoaded -> DeviceSelected -> StreamOpened -> FrameCaptured
    -> Cropped -> Persisted -> Published -> Done.
    The first stage that fails ends the run in the Failed state. Nothing already
    written is rolled back.
    """

    _configuration_filepath: str
    _status_message_source: StatusMessageSource
    _device_enumerator: Callable[[], list[DeviceDescriptor]]
    _frame_capturer: FrameCapturer
    _object_publisher: ObjectPublisher
    _clock: Callable[[], datetime.datetime]
    _state: PipelineState

    def __init__(
        self,
        configuration_filepath: str,
        status_message_source: StatusMessageSource,
        device_enumerator: Callable[[], list[DeviceDescriptor]] = DeviceSelector.enumerate,
        frame_capturer: FrameCapturer | None = None,
        object_publisher: ObjectPublisher | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now
    ):
        self._configuration_filepath = configuration_filepath
        self._status_message_source = status_message_source
        self._device_enumerator = device_enumerator
        self._frame_capturer = frame_capturer or FrameCapturer(status_message_source=status_message_source)
        self._object_publisher = object_publisher or ObjectPublisher(status_message_source=status_message_source)
        self._clock = clock
        self._state = PipelineState.START

    def get_state(self) -> PipelineState:
        return self._state

    def run(self) -> PipelineResult:
        configuration: PlantCameraConfiguration | PipelineFailure = self._run_stage(
            PipelineState.CONFIG_LOADED,
            lambda: ConfigResolver.load(
                filepath=self._configuration_filepath,
                status_message_source=self._status_message_source))
        if isinstance(configuration, PipelineFailure):
            return configuration

        camera_index: int | PipelineFailure = self._run_stage(
            PipelineState.DEVICE_SELECTED,
            lambda: DeviceSelector.select(
                devices=self._device_enumerator(),
                configured_id=configuration.camera_id,
                fail_on_no_match=configuration.no_default_camera,
                status_message_source=self._status_message_source))
        if isinstance(camera_index, PipelineFailure):
            return camera_index

        handle: CameraHandle | PipelineFailure = self._run_stage(
            PipelineState.STREAM_OPENED,
            lambda: self._frame_capturer.open(
                index=camera_index,
                resolution=configuration.capture_resolution(),
                frame_rate=configuration.camera_frame_rate))
        if isinstance(handle, PipelineFailure):
            return handle

        try:
            frame: CapturedFrame | PipelineFailure = self._run_stage(
                PipelineState.FRAME_CAPTURED,
                lambda: self._frame_capturer.capture_one(handle=handle))
        finally:
            FrameCapturer.close(handle=handle)
        if isinstance(frame, PipelineFailure):
            return frame

        image: numpy.ndarray | PipelineFailure = self._run_stage(
            PipelineState.CROPPED,
            lambda: ImageProcessor.crop(
                frame=frame,
                x_px=configuration.crop_x,
                y_px=configuration.crop_y,
                width_px=configuration.crop_width,
                height_px=configuration.crop_height))
        if isinstance(image, PipelineFailure):
            return image

        output_path: Path = SnapshotWriter.build_path(
            output_dir=configuration.output_dir,
            prefix=configuration.output_prefix,
            now=self._clock())
        snapshot: SnapshotRecord | PipelineFailure = self._run_stage(
            PipelineState.PERSISTED,
            lambda: SnapshotWriter.persist(
                image=image,
                path=output_path,
                status_message_source=self._status_message_source,
                jpeg_quality=configuration.jpeg_quality))
        if isinstance(snapshot, PipelineFailure):
            return snapshot

        upload_key: str | PipelineFailure = self._run_stage(
            PipelineState.PUBLISHED,
            lambda: self._object_publisher.publish(
                local_path=snapshot.path,
                configuration=configuration))
        if isinstance(upload_key, PipelineFailure):
            return upload_key

        self._transition(PipelineState.DONE)
        return PipelineSuccess(snapshot=snapshot, upload_key=upload_key)

    def _run_stage(
        self,
        target_state: PipelineState,
        stage: Callable[[], T]
    ) -> T | PipelineFailure:
        try:
            result: T = stage()
        except PlantCameraError as e:
            failure: PipelineFailure = PipelineFailure(
                last_completed_state=self._state,
                failed_stage=target_state,
                error=e)
            self._state = PipelineState.FAILED
            self._status_message_source.enqueue_status_message(
                severity=SeverityLabel.CRITICAL,
                message=f"{type(e).__name__} while reaching {target_state} "
                        f"(last completed {failure.last_completed_state}): {e.message}")
            return failure
        self._transition(target_state)
        return result

    def _transition(self, state: PipelineState) -> None:
        self._state = state
        self._status_message_source.enqueue_status_message(
            severity=SeverityLabel.DEBUG,
            message=f"Pipeline state: {state}.")
