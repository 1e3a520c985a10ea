# Environment variable and home expansion for user-supplied paths
import os
import re
import warnings
from pathlib import Path

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} references in a config path override.

    ABOUTME: Only ${UPPER_CASE} is recognised; $VAR and %VAR% pass through
    ABOUTME: An unset variable stays as typed and raises a UserWarning

    Examples:
        >>> expand_env_vars("${DOTFILES}/claude.json")
        '/home/user/dotfiles/claude.json'
        >>> expand_env_vars("${UNSET_ROOT}/mcp.json")
        '${UNSET_ROOT}/mcp.json'  # with warning
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in os.environ:
            return os.environ[var_name]
        warnings.warn(
            f"Environment variable '{var_name}' not found in config path, keeping it as typed",
            UserWarning,
            stacklevel=3
        )
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def expand_user_path(value: str) -> Path:
    """Turn a user-typed path into a Path.

    ABOUTME: Expands ${VAR} first, then a leading ~ (also one a variable produced)
    """
    return Path(expand_env_vars(value)).expanduser()
