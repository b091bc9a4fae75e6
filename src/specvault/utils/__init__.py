"""Shared utilities: logging and record encoding."""

from ._logging import LogFormatType, create_logger, get_null_logger, log_level_from_string
from ._records import decode_record, encode_record, parse_timestamp

__all__ = [
    "LogFormatType",
    "create_logger",
    "decode_record",
    "encode_record",
    "get_null_logger",
    "log_level_from_string",
    "parse_timestamp",
]
