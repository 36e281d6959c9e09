"""
Reading and writing project files and autosave snapshots.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from kubecomposer.models import Project

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0.0"


def load_project(path: Union[str, Path]) -> Project:
    """
    Load a project from a JSON or YAML file.

    JSON is a subset of YAML, so both are read with ``yaml.safe_load``.

    Args:
        path: Path to the project file

    Returns:
        The validated project

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML/JSON or not a valid project
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse project file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Project file {path} must contain a mapping, got {type(data).__name__}")

    try:
        project = Project.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid project file {path}: {e}") from e

    logger.debug(f"Loaded project from {path}")
    return project


def dump_project(project: Project) -> str:
    """Serialize a project to the JSON string stored as a saved project's data."""
    return project.model_dump_json(by_alias=True, exclude_none=True)


def save_snapshot(project: Project, path: Union[str, Path], saved_at: str) -> Path:
    """
    Write an autosave snapshot of a project.

    Args:
        project: The project to save
        path: Destination file
        saved_at: Timestamp recorded as ``metadata.lastSaved``

    Returns:
        The path written
    """
    path = Path(path)
    snapshot: Dict[str, Any] = project.to_json_dict()
    snapshot["metadata"] = {"lastSaved": saved_at, "version": SNAPSHOT_VERSION}

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(snapshot, f, indent=2)

    logger.info(f"Saved snapshot to {path}")
    return path


def load_snapshot(path: Union[str, Path]) -> Optional[Project]:
    """
    Load an autosave snapshot.

    Snapshots from another format version are ignored rather than migrated.

    Returns:
        The project, or None if the file is missing, unreadable, or from a
        different version
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError, OSError) as e:
        logger.warning(f"Could not read snapshot {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Ignoring snapshot {path}: not an object")
        return None

    metadata = data.get("metadata")
    version = metadata.get("version") if isinstance(metadata, dict) else None
    if version != SNAPSHOT_VERSION:
        logger.warning(f"Ignoring snapshot {path}: version {version!r} != {SNAPSHOT_VERSION}")
        return None

    try:
        return Project.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid snapshot {path}: {e}")
        return None
