"""
Shared utilities for ClassWatch data files
Provides basic JSON loading/saving used by the status store and config loader
"""

import json
import os
from typing import Any
import logging

logger = logging.getLogger(__name__)


def load_json_file(file_path: str, default: Any = None) -> Any:
    """Load a JSON document, returning ``default`` when the file does not exist"""
    if not os.path.exists(file_path):
        logger.info(f"File {file_path} does not exist yet")
        return default
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json_file(file_path: str, data: Any):
    """Save a JSON document, replacing the whole file"""
    try:
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{file_path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, file_path)
        logger.debug(f"Saved {file_path}")
    except Exception as e:
        logger.error(f"Error saving {file_path}: {e}")
        raise
