# ABOUTME: Utility modules for mcpmgr
# ABOUTME: Exports env expansion, atomic file IO, validation and backup id helpers

from mcpmgr.utils.env import expand_env_vars, expand_user_path
from mcpmgr.utils.fileio import atomic_write_bytes, atomic_write_text, path_lock
from mcpmgr.utils.timestamp import decode_id, encode_id, to_display
from mcpmgr.utils.validation import (
    ValidationError,
    has_errors,
    validate_command_exists,
    validate_entry,
    validate_url,
)

__all__ = [
    "expand_env_vars",
    "expand_user_path",
    "atomic_write_bytes",
    "atomic_write_text",
    "path_lock",
    "encode_id",
    "decode_id",
    "to_display",
    "ValidationError",
    "has_errors",
    "validate_command_exists",
    "validate_entry",
    "validate_url",
]
