# rbc_vfi/io/file_utils.py
"""
JSON helpers for run configurations and benchmark reports.

Example:
    >>> from rbc_vfi.io.file_utils import load_json_file, save_json_file
    >>> run = load_json_file("config/vfi.json")
    >>> save_json_file({"results": []}, "out/benchmark.json")
"""

import json
import logging
import os
import sys
from typing import Any, Dict

logger = logging.getLogger(__name__)


def load_json_file(filename: str) -> Dict[str, Any]:
    """
    Read a JSON document whose top level is an object.

    Run configurations are looked up section by section, so a document
    that parses to a list or scalar is rejected like a malformed one.

    Args:
        filename: Path to the JSON file.

    Returns:
        The top-level object.

    Raises:
        SystemExit: If the file is missing, unreadable, not valid JSON,
            or not a JSON object.
    """
    if not os.path.exists(filename):
        logger.error(f"JSON file '{filename}' not found.")
        sys.exit(1)

    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {filename} (line {e.lineno}): {e.msg}")
        sys.exit(1)
    except OSError as e:
        logger.error(f"Could not read {filename}: {e}")
        sys.exit(1)

    if not isinstance(data, dict):
        logger.error(
            f"{filename} must hold a JSON object, got {type(data).__name__}."
        )
        sys.exit(1)
    return data


def save_json_file(data: Dict[str, Any], filename: str) -> None:
    """
    Write *data* as indented JSON, creating parent directories.

    Non-finite floats (e.g. an infinite speed-up) are written as
    ``Infinity`` / ``NaN``, which :func:`load_json_file` reads back.

    Raises:
        OSError: If the file cannot be written.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    try:
        with open(filename, 'w') as f:
            json.dump(data, f, indent=4)
    except OSError as e:
        logger.error(f"Failed to write {filename}: {e}")
        raise
    logger.info(f"Wrote {filename}")
