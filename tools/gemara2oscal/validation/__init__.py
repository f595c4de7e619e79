"""
Input and output validation

Validates Gemara inputs against JSON schemas and generated OSCAL artifacts
with NIST oscal-cli.
"""

from .oscal_validator import OSCALValidator
from .schema_validator import GemaraValidator

__all__ = [
    'GemaraValidator',
    'OSCALValidator'
]
