# ABOUTME: Validation utilities for MCP server entries
# ABOUTME: Errors block a write, warnings are only reported
import os
import shutil
from dataclasses import dataclass
from urllib.parse import urlparse

from mcpmgr.models import ServerEntry, SseTransport, StdioTransport
from mcpmgr.utils.env import ENV_VAR_PATTERN


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Check that a command resolves on PATH.

    ABOUTME: Uses shutil.which() for cross-platform command lookup
    ABOUTME: Missing commands are warnings - the target tool may have its own PATH
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found: {command}",
            severity="warning"
        )
    return None


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL is properly formatted.

    ABOUTME: Requires HTTP or HTTPS scheme and a host
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        return ValidationError(
            server_name="",
            message=f"Invalid URL format '{url}': {e}",
            severity="error"
        )
    if parsed.scheme not in ("http", "https"):
        return ValidationError(
            server_name="",
            message=f"URL must use HTTP or HTTPS scheme: {url}",
            severity="error"
        )
    if not parsed.netloc:
        return ValidationError(
            server_name="",
            message=f"URL missing host/domain: {url}",
            severity="error"
        )
    return None


def _unset_env_refs(value: str) -> list[str]:
    return [m.group(1) for m in ENV_VAR_PATTERN.finditer(value) if m.group(1) not in os.environ]


def validate_entry(entry: ServerEntry, check_commands: bool = False) -> list[ValidationError]:
    """Validate a server entry.

    ABOUTME: Structural problems (empty name, empty command, bad URL) are errors
    ABOUTME: Unset ${VAR} references are warnings
    ABOUTME: PATH lookup only runs with check_commands=True (it's slow and host dependent)

    Args:
        entry: ServerEntry to validate
        check_commands: Also look stdio commands up on PATH

    Returns:
        List of ValidationError instances (empty if valid)
    """
    errors: list[ValidationError] = []

    def add(message: str, severity: str) -> None:
        errors.append(ValidationError(server_name=entry.name, message=message, severity=severity))

    if not entry.name or not entry.name.strip():
        add("Server name must not be empty", "error")

    if isinstance(entry.transport, StdioTransport):
        command = entry.transport.command
        if not command.strip():
            add("Command is required for stdio servers", "error")
        else:
            if check_commands:
                cmd_error = validate_command_exists(command)
                if cmd_error:
                    add(cmd_error.message, cmd_error.severity)
            for var_name in _unset_env_refs(command):
                add(f"Environment variable '${var_name}' not set (referenced in command)", "warning")

        for arg in entry.transport.args:
            for var_name in _unset_env_refs(arg):
                add(f"Environment variable '${var_name}' not set (referenced in args)", "warning")

    elif isinstance(entry.transport, SseTransport):
        url = entry.transport.url
        if not url.strip():
            add("URL is required for sse servers", "error")
        else:
            url_error = validate_url(url)
            if url_error:
                add(url_error.message, url_error.severity)

    for key, value in entry.env.items():
        if not key:
            add("Environment variable names must not be empty", "error")
        for var_name in _unset_env_refs(value):
            add(f"Environment variable '${var_name}' not set (referenced in env.{key})", "warning")

    return errors


def has_errors(errors: list[ValidationError]) -> bool:
    return any(err.severity == "error" for err in errors)
