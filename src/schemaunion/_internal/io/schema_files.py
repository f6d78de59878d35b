"""Schema, config and input file I/O helpers (internal)."""

import json
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from schemaunion.kernel.config import GenerationConfig


def path_to_uri(path: Union[str, Path]) -> str:
    """Absolute file: URI for a path (the identity of a loaded document)."""
    return Path(path).resolve().as_uri()


def load_json_from_path(path: Union[str, Path]) -> Any:
    """Load a JSON document from a file path."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_json_from_uri(uri: str) -> Any:
    """Load a JSON document addressed by a file: URI.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the URI scheme is not file:
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"No loader for scheme '{parsed.scheme or '<none>'}'")
    return load_json_from_path(url2pathname(parsed.path))


def load_config_from_path(path: Union[str, Path]) -> GenerationConfig:
    """Load a generation config from a JSON file path."""
    return GenerationConfig.from_json_bytes(Path(path).read_bytes())
