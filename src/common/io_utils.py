import hjson
import json
import os
from typing import Any, Callable, Literal


class IOUtils:
    """
    static class for IO-related utility functions.
    """

    PathType = Literal["filepath", "path"]

    @staticmethod
    def exists(
        path: str,
        pathtype: PathType,
        on_error_for_user: Callable[[str], Any],
        on_error_for_dev: Callable[[str], Any],
        create_path: bool = False
    ) -> bool:
        """
        :param path: Location of target
        :param pathtype: "filepath" (target is file) or "path" (target is directory)
        :param on_error_for_user:
            Function to supply with a publicly-viewable string (message viewable by end-user) in the event of an error.
        :param on_error_for_dev:
            Function to supply with a developer-friendly string (not by end-user) in the event of an error.
        :param create_path:
            If pathtype == "path" and this is True, try to create the path if it does not exist. Default False.
        :return: True if there is a file/path at the indicated path, otherwise False.
        """
        exists: bool = os.path.exists(path)
        if pathtype == "filepath":
            if exists and not os.path.isfile(path):
                on_error_for_user(
                    "Filepath location exists but is not a file. "
                    "Most likely a directory exists at that location, "
                    "and it needs to be manually removed.")
                on_error_for_dev(
                    f"Specified filepath location {path} exists but is not a file.")
                return False
        elif pathtype == "path":
            if exists and not os.path.isdir(path):
                on_error_for_user(
                    "Path location exists but is not a path. "
                    "Most likely a file exists at that location, "
                    "and it needs to be manually removed.")
                on_error_for_dev(
                    f"Specified path location {path} exists but is not a path.")
                return False
            if create_path and not exists:
                try:
                    os.makedirs(name=path, exist_ok=True)
                except OSError as e:
                    on_error_for_user("The directory could not be created.")
                    on_error_for_dev(str(e))
                    return False
                exists = os.path.exists(path)
        return exists

    @staticmethod
    def bytes_read(
        filepath: str,
        on_error_for_user: Callable[[str], Any],
        on_error_for_dev: Callable[[str], Any]
    ) -> bytes | None:
        """
        Read the whole file into memory.
        :return: File contents if successful, otherwise None
        """
        if not IOUtils.exists(
            path=filepath,
            pathtype="filepath",
            on_error_for_user=on_error_for_user,
            on_error_for_dev=on_error_for_dev
        ):
            if not os.path.exists(filepath):
                on_error_for_user("The file does not exist.")
                on_error_for_dev(f"No file at {filepath}.")
            return None
        try:
            with open(filepath, 'rb') as input_file:
                return input_file.read()
        except OSError as e:
            on_error_for_user("An unexpected file I/O error happened while reading a file.")
            on_error_for_dev(str(e))
            return None

    @staticmethod
    def bytes_write(
        filepath: str,
        data: bytes,
        on_error_for_user: Callable[[str], Any],
        on_error_for_dev: Callable[[str], Any]
    ) -> bool:
        """
        Write data to filepath, creating parent directories as needed. Existing files are overwritten.
        :return: True if the file was written, otherwise False.
        """
        path: str = os.path.dirname(filepath)
        if path and not IOUtils.exists(
            path=path,
            pathtype="path",
            on_error_for_user=on_error_for_user,
            on_error_for_dev=on_error_for_dev,
            create_path=True
        ):
            return False
        try:
            with open(filepath, 'wb') as output_file:
                output_file.write(data)
        except OSError as e:
            on_error_for_user("An unexpected file I/O error happened while writing a file.")
            on_error_for_dev(str(e))
            return False
        return True

    @staticmethod
    def hjson_read(
        filepath: str,
        on_error_for_user: Callable[[str], Any],
        on_error_for_dev: Callable[[str], Any]
    ) -> dict | None:
        """
        :param filepath:
        :param on_error_for_user:
            Function to supply with a publicly-viewable string (message viewable by end-user) in the event of an error.
        :param on_error_for_dev:
            Function to supply with a developer-friendly string (not by end-user) in the event of an error.
        :return: Dictionary representing the JSON data if successful, otherwise None
        """
        if not IOUtils.exists(
            path=filepath,
            pathtype="filepath",
            on_error_for_user=on_error_for_user,
            on_error_for_dev=on_error_for_dev
        ):
            if not os.path.exists(filepath):
                on_error_for_user("The file does not exist.")
                on_error_for_dev(f"No file at {filepath}.")
            return None
        json_dict: Any
        try:
            with open(filepath, 'r', encoding='utf-8') as input_file:
                json_dict = hjson.load(input_file)
        except OSError as e:
            on_error_for_user("An unexpected file I/O error happened while reading a file.")
            on_error_for_dev(str(e))
            return None
        except (hjson.HjsonDecodeError, UnicodeDecodeError) as e:
            on_error_for_user("The file could not be parsed.")
            on_error_for_dev(str(e))
            return None
        if not isinstance(json_dict, dict):
            on_error_for_user("The file does not contain a key/value document.")
            on_error_for_dev(f"Expected top-level object in {filepath}, got {type(json_dict).__name__}.")
            return None
        return dict(json_dict)

    @staticmethod
    def json_write(
        filepath: str,
        json_dict: dict,
        on_error_for_user: Callable[[str], Any],
        on_error_for_dev: Callable[[str], Any],
        indent: int = 4
    ) -> bool:
        """
        :param filepath:
        :param json_dict:
        :param on_error_for_user:
            Function to supply with a publicly-viewable string (message viewable by end-user) in the event of an error.
        :param on_error_for_dev:
            Function to supply with a developer-friendly string (not by end-user) in the event of an error.
        :param indent: Width (spaces) of each indentation level. Default 4.
        :return: True if the file was written, otherwise False.
        """
        return IOUtils.bytes_write(
            filepath=filepath,
            data=json.dumps(json_dict, sort_keys=False, indent=indent).encode("utf-8"),
            on_error_for_user=on_error_for_user,
            on_error_for_dev=on_error_for_dev)
