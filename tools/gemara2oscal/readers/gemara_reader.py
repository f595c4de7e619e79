"""
Readers for Gemara documents

Load Gemara layer 1 guidance documents, layer 2 control catalogs, layer 3
parameter modifiers and layer 4 control evaluations from YAML or JSON.
"""

import logging
from typing import Any, Dict, List

from .base_reader import BaseReader

logger = logging.getLogger(__name__)


class _MappingReader(BaseReader):
    """Reader for documents whose root is a mapping"""

    document_type = "document"

    def read(self) -> Dict[str, Any]:
        content = self._load()
        if not isinstance(content, dict):
            raise ValueError(f"Expected a {self.document_type} mapping in {self.file_path}")

        title = content.get('metadata', {}).get('title', '')
        logger.info(f"Read {self.document_type} '{title}' from {self.file_path}")
        return content


class GuidanceReader(_MappingReader):
    """Reader for Gemara layer 1 guidance documents"""

    document_type = "guidance document"


class CatalogReader(_MappingReader):
    """Reader for Gemara layer 2 control catalogs"""

    document_type = "control catalog"


class EvaluationReader(BaseReader):
    """Reader for Gemara layer 4 control evaluations

    Accepts either a list of evaluations or a mapping holding them under
    'evaluations'.
    """

    def read(self) -> List[Dict[str, Any]]:
        content = self._load()
        if isinstance(content, dict):
            content = content.get("evaluations", [])

        if not isinstance(content, list):
            raise ValueError(f"Expected a list of control evaluations in {self.file_path}")

        logger.info(f"Read {len(content)} control evaluations from {self.file_path}")
        return content


class ParameterModifierReader(BaseReader):
    """Reader for Gemara layer 3 parameter modifiers"""

    def read(self) -> Dict[str, Any]:
        """Return {'reference-id': ..., 'parameter-modifiers': [...]}"""
        content = self._load()
        if not isinstance(content, dict) or "reference-id" not in content:
            raise ValueError(f"Expected a mapping with 'reference-id' in {self.file_path}")

        content.setdefault("parameter-modifiers", [])
        logger.info(
            f"Read {len(content['parameter-modifiers'])} parameter modifiers "
            f"for {content['reference-id']} from {self.file_path}"
        )
        return content
