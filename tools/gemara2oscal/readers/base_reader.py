"""
Base reader class for gemara2oscal

Provides file loading shared by the Gemara and OSCAL document readers.
"""

import hashlib
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class BaseReader(ABC):
    """Base class for all document readers"""

    YAML_SUFFIXES = ('.yaml', '.yml')
    JSON_SUFFIXES = ('.json',)

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"Input file not found: {file_path}")

        suffix = self.file_path.suffix.lower()
        if suffix not in self.YAML_SUFFIXES + self.JSON_SUFFIXES:
            raise ValueError(f"Unsupported document type: {suffix}")

        self.file_hash = self._calculate_file_hash()

    def _calculate_file_hash(self) -> str:
        """Calculate SHA-256 hash of input file"""
        hasher = hashlib.sha256()
        with open(self.file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def _load(self) -> Any:
        """Load the file as YAML or JSON depending on its suffix"""
        logger.debug(f"Loading {self.file_path} (sha256 {self.file_hash})")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            if self.file_path.suffix.lower() in self.JSON_SUFFIXES:
                content = json.load(f)
            else:
                content = yaml.safe_load(f)

        if content is None:
            raise ValueError(f"Input file is empty: {self.file_path}")

        return content

    @abstractmethod
    def read(self) -> Any:
        """Read the document into its source representation"""
        pass
