from src.common import \
    SeverityLabel, \
    StatusMessageSource
from src.plant_camera import \
    ConfigError, \
    ConfigResolver, \
    DEFAULT_CONFIGURATION_FILEPATH, \
    PipelineFailure, \
    PipelineResult, \
    SnapshotPipeline
import logging
import sys
from typing import Final


logger = logging.getLogger(__name__)

_WRITE_DEFAULT_CONFIGURATION_FLAG: Final[str] = "--write-default-config"
_USAGE: Final[str] = \
    f"usage: plant-camera [{_WRITE_DEFAULT_CONFIGURATION_FLAG}] [configuration_filepath]"
_EXIT_CODE_USAGE: Final[int] = 2


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)

    arguments: list[str] = list(sys.argv[1:] if argv is None else argv)
    write_default: bool = _WRITE_DEFAULT_CONFIGURATION_FLAG in arguments
    if write_default:
        arguments.remove(_WRITE_DEFAULT_CONFIGURATION_FLAG)
    if len(arguments) > 1 or any(argument.startswith("-") for argument in arguments):
        print(_USAGE, file=sys.stderr)
        return _EXIT_CODE_USAGE
    configuration_filepath: str = arguments[0] if arguments else DEFAULT_CONFIGURATION_FILEPATH

    if write_default:
        try:
            ConfigResolver.write_default(filepath=configuration_filepath)
        except ConfigError as e:
            logger.error(e.message)
            return PipelineFailure.EXIT_CODE
        return 0

    status_message_source: StatusMessageSource = StatusMessageSource(
        source_label="plant_camera",
        send_to_logger=True)
    pipeline: SnapshotPipeline = SnapshotPipeline(
        configuration_filepath=configuration_filepath,
        status_message_source=status_message_source)
    result: PipelineResult = pipeline.run()
    if isinstance(result, PipelineFailure):
        status_message_source.enqueue_status_message(
            severity=SeverityLabel.ERROR,
            message=f"Snapshot failed at stage {result.failed_stage}, exiting...")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
