"""evaldesk request loader - parsing, validation, and error reporting."""

from evaldesk.loader.errors import ErrorFormatter
from evaldesk.loader.validator import (
    ValidationErrorDetail,
    load_request_file,
    load_request_string,
    validate_request,
)
from evaldesk.loader.yaml_parser import RequestParseError, parse_request_source

__all__ = [
    "ErrorFormatter",
    "RequestParseError",
    "ValidationErrorDetail",
    "load_request_file",
    "load_request_string",
    "parse_request_source",
    "validate_request",
]
