from src.common import StatusMessageSource
from src.plant_camera import \
    ObjectPublisher, \
    PlantCameraConfiguration, \
    SNAPSHOT_CONTENT_TYPE, \
    UploadError
import boto3
from botocore.stub import Stubber
import os
import tempfile
from typing import Any, Final
from unittest import TestCase


JPEG_CONTENT: Final[bytes] = b"\xff\xd8\xff\xe0 not really a jpeg \xff\xd9"
CONFIGURATION: Final[PlantCameraConfiguration] = PlantCameraConfiguration(
    r2_account_id="0123456789abcdef",
    r2_bucket_name="garden",
    r2_access_key_id="access-key-id",
    r2_secret_access_key="secret-access-key",
    r2_project_prefix="plant-cam/")


class TestObjectPublisher(TestCase):

    def setUp(self) -> None:
        self.temporary_directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.temporary_directory.cleanup)
        self.status_message_source = StatusMessageSource(source_label="test", send_to_logger=False)
        self.client: Any = boto3.client(
            "s3",
            endpoint_url=CONFIGURATION.endpoint_url(),
            region_name=CONFIGURATION.r2_region,
            aws_access_key_id=CONFIGURATION.r2_access_key_id,
            aws_secret_access_key=CONFIGURATION.r2_secret_access_key)
        self.stubber = Stubber(self.client)
        self.stubber.activate()
        self.addCleanup(self.stubber.deactivate)
        self.publisher = ObjectPublisher(
            status_message_source=self.status_message_source,
            client_factory=lambda configuration: self.client)

    def write_snapshot(self, filename: str) -> str:
        filepath: str = os.path.join(self.temporary_directory.name, filename)
        with open(filepath, 'wb') as output_file:
            output_file.write(JPEG_CONTENT)
        return filepath

    def test_build_key(self):
        self.assertEqual(
            ObjectPublisher.build_key(project_prefix="plant-cam/", local_path="pictures/20240615_0930.jpg"),
            "plant-cam/pictures/20240615_0930.jpg")
        self.assertEqual(
            ObjectPublisher.build_key(project_prefix="", local_path="/var/lib/cam1-20240101_1234.jpg"),
            "pictures/cam1-20240101_1234.jpg")

    def test_publish_puts_file_contents_with_jpeg_content_type(self):
        filepath: str = self.write_snapshot("20240615_0930.jpg")
        self.stubber.add_response(
            "put_object",
            {"ETag": "\"0123456789abcdef\""},
            expected_params={
                "Bucket": "garden",
                "Key": "plant-cam/pictures/20240615_0930.jpg",
                "Body": JPEG_CONTENT,
                "ContentType": SNAPSHOT_CONTENT_TYPE})
        key: str = self.publisher.publish(local_path=filepath, configuration=CONFIGURATION)
        self.assertEqual(key, "plant-cam/pictures/20240615_0930.jpg")
        self.stubber.assert_no_pending_responses()

    def test_publish_service_error(self):
        filepath: str = self.write_snapshot("20240615_0930.jpg")
        self.stubber.add_client_error(
            "put_object",
            service_error_code="AccessDenied",
            service_message="Access Denied",
            http_status_code=403)
        with self.assertRaises(UploadError) as context:
            self.publisher.publish(local_path=filepath, configuration=CONFIGURATION)
        self.assertIn("AccessDenied", context.exception.message)
        self.assertTrue(os.path.exists(filepath))

    def test_publish_missing_file(self):
        with self.assertRaises(UploadError):
            self.publisher.publish(
                local_path=os.path.join(self.temporary_directory.name, "absent.jpg"),
                configuration=CONFIGURATION)
        self.stubber.assert_no_pending_responses()

    def test_publish_without_bucket_name(self):
        filepath: str = self.write_snapshot("20240615_0930.jpg")
        with self.assertRaises(UploadError):
            self.publisher.publish(
                local_path=filepath,
                configuration=CONFIGURATION.model_copy(update={"r2_bucket_name": ""}))
