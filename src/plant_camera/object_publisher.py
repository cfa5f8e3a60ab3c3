from .configuration import PlantCameraConfiguration
from .exceptions import UploadError
from src.common import \
    IOUtils, \
    SeverityLabel, \
    StatusMessageSource
import boto3
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError
import logging
import os
from typing import Any, Callable, Final


logger = logging.getLogger(__name__)

SNAPSHOT_CONTENT_TYPE: Final[str] = "image/jpeg"
_REMOTE_DIRECTORY: Final[str] = "pictures"


def create_s3_client(configuration: PlantCameraConfiguration) -> Any:
    """
    Build an S3 client for the configured R2 (or other S3-compatible) endpoint.
    The client makes a single attempt per request.
    """
    return boto3.client(
        "s3",
        endpoint_url=configuration.endpoint_url(),
        region_name=configuration.r2_region,
        aws_access_key_id=configuration.r2_access_key_id,
        aws_secret_access_key=configuration.r2_secret_access_key,
        config=BotocoreConfig(retries={"max_attempts": 1, "mode": "standard"}))


class ObjectPublisher:

    _status_message_source: StatusMessageSource
    _client_factory: Callable[[PlantCameraConfiguration], Any]

    def __init__(
        self,
        status_message_source: StatusMessageSource,
        client_factory: Callable[[PlantCameraConfiguration], Any] = create_s3_client
    ):
        self._status_message_source = status_message_source
        self._client_factory = client_factory

    @staticmethod
    def build_key(
        project_prefix: str,
        local_path: str | os.PathLike
    ) -> str:
        return f"{project_prefix}{_REMOTE_DIRECTORY}/{os.path.basename(local_path)}"

    def publish(
        self,
        local_path: str | os.PathLike,
        configuration: PlantCameraConfiguration
    ) -> str:
        """
        Read the file at local_path back into memory and PUT it to the configured bucket.
        Any existing object under the same key is overwritten.
        :return: the object key
        :raises UploadError: if the file cannot be read or the upload fails
        """
        self._status_message_source.enqueue_status_message(
            severity=SeverityLabel.INFO,
            message="Updating image.")

        errors: list[str] = list()
        content: bytes | None = IOUtils.bytes_read(
            filepath=str(local_path),
            on_error_for_user=errors.append,
            on_error_for_dev=logger.debug)
        if content is None:
            raise UploadError(f"Failed to read {local_path} for upload: {' '.join(errors)}")

        key: str = ObjectPublisher.build_key(
            project_prefix=configuration.r2_project_prefix,
            local_path=local_path)
        try:
            client: Any = self._client_factory(configuration)
            client.put_object(
                Bucket=configuration.r2_bucket_name,
                Key=key,
                Body=content,
                ContentType=SNAPSHOT_CONTENT_TYPE)
        except (BotoCoreError, ClientError, ValueError) as e:  # ValueError: malformed endpoint
            raise UploadError(
                f"Failed to upload picture to {configuration.r2_bucket_name}/{key}: {e}") from e

        self._status_message_source.enqueue_status_message(
            severity=SeverityLabel.INFO,
            message=f"Uploaded {len(content)} bytes to {configuration.r2_bucket_name}/{key}.")
        return key
