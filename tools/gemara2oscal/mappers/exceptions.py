"""
Conversion errors

Raised by the mappers when a source document cannot be converted.
"""


class ConversionError(Exception):
    """Base class for all Gemara to OSCAL conversion failures"""


class DateParseError(ConversionError, ValueError):
    """A metadata date in the source document does not match its expected format"""

    def __init__(self, field: str, value, expected_format: str):
        self.field = field
        self.value = value
        self.expected_format = expected_format
        super().__init__(
            f"Could not parse {field} '{value}' (expected format {expected_format})"
        )


class ShapeError(ConversionError, RuntimeError):
    """An intermediate OSCAL document does not have the expected shape"""
