import json
from pathlib import Path

from constants import CONFIG_FILE
from core.exceptions import FileReadError, FileWriteError
from core.file_io import FilesystemFileReader, FilesystemFileWriter
from models import SettingsData


def get_config_file(config_file: Path = CONFIG_FILE) -> SettingsData:
    """
    Load the persisted settings, or an empty dict if none were saved yet.

    Raises:
        FileReadError: If the file exists but is not valid JSON.
    """
    if not config_file.exists():
        return {}
    file_content = FilesystemFileReader().read_file(config_file)
    try:
        data = json.loads(file_content)
    except json.JSONDecodeError as e:
        raise FileReadError(
            message=f"Settings file is not valid JSON: {config_file}",
            file_path=str(config_file),
            original_exception=e,
        ) from e
    if not isinstance(data, dict):
        raise FileReadError(
            message=f"Settings file must hold a JSON object: {config_file}",
            file_path=str(config_file),
        )

    settings: SettingsData = {}
    if isinstance(data.get("converter"), str):
        settings["converter"] = data["converter"]
    if isinstance(data.get("converter_args"), list):
        settings["converter_args"] = [str(arg) for arg in data["converter_args"]]
    return settings


def save_config(
    converter: str,
    converter_args: list[str],
    config_file: Path = CONFIG_FILE,
) -> None:
    """
    Persist the converter settings.

    Raises:
        FileWriteError: If the settings folder or file cannot be written.
    """
    config_dir = config_file.parent
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileWriteError(
            message=f"Failed to create settings folder: {config_dir}",
            file_path=str(config_dir),
            original_exception=e,
        ) from e

    data: SettingsData = {"converter": converter, "converter_args": converter_args}
    FilesystemFileWriter.from_path(config_file).write_file(json.dumps(data, indent=2))
