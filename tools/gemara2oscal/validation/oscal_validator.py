"""
OSCAL validator using NIST oscal-cli

Validates generated Catalogs, Component Definitions and Assessment Results
with the official NIST oscal-cli tool.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_VALIDATION_TIMEOUT = 60

# OSCAL root element -> oscal-cli command
OSCAL_CLI_TYPES = {
    "catalog": "catalog",
    "component-definition": "component-definition",
    "assessment-plan": "ap",
    "assessment-results": "ar"
}


class OSCALValidator:
    """Validator for OSCAL artifacts using NIST oscal-cli"""

    def __init__(self, oscal_cli_path: str = "oscal-cli", timeout: int = DEFAULT_VALIDATION_TIMEOUT):
        self.oscal_cli_path = oscal_cli_path
        self.timeout = timeout
        self._check_oscal_cli()

    def _check_oscal_cli(self) -> None:
        """Check if oscal-cli is available"""
        try:
            result = subprocess.run(
                [self.oscal_cli_path, "--version"],
                capture_output=True,
                text=True,
                check=True
            )
            logger.info(f"Using {result.stdout.strip()}")
        except (subprocess.CalledProcessError, FileNotFoundError):
            raise RuntimeError(
                f"oscal-cli not found at {self.oscal_cli_path}. "
                "Install it from https://github.com/usnistgov/oscal-cli"
            )

    def validate_file(self, file_path: Path) -> Dict[str, Any]:
        """Validate OSCAL file using oscal-cli"""
        logger.info(f"Validating OSCAL file: {file_path}")

        if not file_path.exists():
            return self._create_error_result(file_path, f"File not found: {file_path}")

        doc_type = self._detect_oscal_type(file_path)
        if not doc_type:
            return self._create_error_result(
                file_path,
                f"Could not determine OSCAL document type for {file_path}"
            )

        try:
            result = subprocess.run(
                [self.oscal_cli_path, doc_type, "validate", str(file_path)],
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            return self._create_error_result(file_path, f"Validation timeout for {file_path}")

        return self._parse_validation_result(file_path, result)

    def validate_directory(self, directory: Path) -> Dict[str, Dict[str, Any]]:
        """Validate all OSCAL JSON files in directory"""
        results = {}

        if not directory.exists():
            logger.error(f"Directory not found: {directory}")
            return results

        oscal_files = sorted(directory.glob("*.json"))
        logger.info(f"Validating {len(oscal_files)} files in {directory}")

        for file_path in oscal_files:
            if self._detect_oscal_type(file_path) is None:
                continue
            results[str(file_path)] = self.validate_file(file_path)

        return results

    def _parse_validation_result(self, file_path: Path,
                                 result: subprocess.CompletedProcess) -> Dict[str, Any]:
        """Parse oscal-cli validation output"""
        validation_result = {
            "file": str(file_path),
            "valid": result.returncode == 0,
            "exit_code": result.returncode,
            "errors": [],
            "warnings": []
        }

        for line in (result.stderr or "").splitlines() + (result.stdout or "").splitlines():
            line = line.strip()
            lowered = line.lower()
            if not line:
                continue

            if "warning" in lowered:
                validation_result["warnings"].append(line)
            elif any(keyword in lowered for keyword in ["error", "invalid", "failed"]):
                validation_result["errors"].append(line)

        return validation_result

    def _create_error_result(self, file_path: Path, error_message: str) -> Dict[str, Any]:
        """Create error result structure"""
        return {
            "file": str(file_path),
            "valid": False,
            "exit_code": -1,
            "errors": [error_message],
            "warnings": []
        }

    def _detect_oscal_type(self, file_path: Path) -> Optional[str]:
        """Detect OSCAL document type for validation"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return None
        except IOError as e:
            logger.error(f"Could not read file {file_path}: {e}")
            return None

        if not isinstance(content, dict):
            return None

        for oscal_key, cli_type in OSCAL_CLI_TYPES.items():
            if oscal_key in content:
                logger.debug(f"Detected OSCAL type '{cli_type}' for {file_path}")
                return cli_type

        logger.warning(f"No recognized OSCAL document type found in {file_path}")
        return None
