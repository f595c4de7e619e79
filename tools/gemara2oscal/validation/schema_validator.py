"""
Gemara input validator using JSON schemas

Checks the shape of Gemara documents before they are handed to the mappers.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

GUIDANCE_SCHEMA = "gemara_guidance.json"
CATALOG_SCHEMA = "gemara_catalog.json"
EVALUATIONS_SCHEMA = "gemara_evaluations.json"
PARAMETER_MODIFIERS_SCHEMA = "gemara_parameter_modifiers.json"


class GemaraValidator:
    """Validator for Gemara documents using JSON schemas"""

    def __init__(self, schema_dir: Optional[Path] = None):
        self.schema_dir = Path(schema_dir) if schema_dir else DEFAULT_SCHEMA_DIR
        self.schemas = {}
        self._load_schemas()

    def _load_schemas(self) -> None:
        """Load all Gemara schemas from schema directory"""
        if not self.schema_dir.exists():
            logger.warning(f"Schema directory not found: {self.schema_dir}")
            return

        for schema_file in self.schema_dir.glob("gemara_*.json"):
            schema_name = schema_file.name
            try:
                with open(schema_file, 'r') as f:
                    schema = json.load(f)

                Draft7Validator.check_schema(schema)

                self.schemas[schema_name] = schema
                logger.debug(f"Loaded schema: {schema_name}")

            except (json.JSONDecodeError, jsonschema.SchemaError) as e:
                logger.error(f"Invalid schema {schema_file}: {e}")

    def validate(self, data: Any, schema_name: str) -> bool:
        """Validate data against specified schema"""
        if schema_name not in self.schemas:
            logger.error(f"Schema not found: {schema_name}")
            return False

        validator = Draft7Validator(self.schemas[schema_name])
        errors = list(validator.iter_errors(data))

        if errors:
            logger.error(f"Input validation failed for {schema_name}:")
            for error in errors:
                logger.error(f"  {error.message} at {' -> '.join(str(p) for p in error.absolute_path)}")
            return False

        logger.info(f"Input validation successful for {schema_name}")
        return True

    def get_validation_report(self, data: Any, schema_name: str) -> Dict[str, Any]:
        """Get detailed validation report"""
        if schema_name not in self.schemas:
            return {
                "valid": False,
                "errors": [f"Schema not found: {schema_name}"],
                "schema": schema_name
            }

        validator = Draft7Validator(self.schemas[schema_name])

        errors = [
            {
                "message": error.message,
                "path": list(error.absolute_path),
                "schema_path": list(error.schema_path)
            }
            for error in validator.iter_errors(data)
        ]

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "schema": schema_name
        }
