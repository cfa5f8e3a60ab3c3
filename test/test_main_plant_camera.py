from src.main_plant_camera import main
from src.plant_camera import PlantCameraConfiguration
import json
import os
import tempfile
from unittest import TestCase


class TestMain(TestCase):

    def setUp(self) -> None:
        self.temporary_directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.temporary_directory.cleanup)

    def test_write_default_configuration(self):
        filepath: str = os.path.join(self.temporary_directory.name, "plant_camera_config.json")
        self.assertEqual(main(["--write-default-config", filepath]), 0)
        with open(filepath, 'r', encoding='utf-8') as input_file:
            self.assertEqual(PlantCameraConfiguration(**json.load(input_file)), PlantCameraConfiguration())
        self.assertEqual(main(["--write-default-config", filepath]), 1)

    def test_missing_configuration_exits_non_zero(self):
        self.assertEqual(main([os.path.join(self.temporary_directory.name, "absent.json")]), 1)

    def test_usage_error(self):
        self.assertEqual(main(["first.json", "second.json"]), 2)
        self.assertEqual(main(["--verbose"]), 2)
