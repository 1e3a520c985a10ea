# Tests for validation utilities
import pytest

from mcpmgr.utils.validation import (
    ValidationError,
    has_errors,
    validate_command_exists,
    validate_entry,
    validate_url,
)

from conftest import sse, stdio


class TestValidateCommandExists:
    """Tests for validate_command_exists function."""

    def test_invalid_command_is_warning(self):
        """Test that a missing command is only a warning."""
        result = validate_command_exists("definitely_not_a_real_command_xyz123")
        assert result is not None
        assert result.severity == "warning"
        assert "definitely_not_a_real_command_xyz123" in result.message
        assert result.server_name == ""

    def test_existing_command_returns_none(self, monkeypatch):
        """Test that a command found on PATH passes."""
        monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/bin/{cmd}")
        assert validate_command_exists("npx") is None


class TestValidateUrl:
    """Tests for validate_url function."""

    @pytest.mark.parametrize("url", ["https://example.com/mcp", "http://localhost:8080/sse"])
    def test_valid_urls(self, url):
        assert validate_url(url) is None

    def test_rejects_other_schemes(self):
        result = validate_url("ftp://example.com")
        assert result is not None
        assert result.severity == "error"
        assert "HTTP" in result.message

    def test_rejects_missing_host(self):
        result = validate_url("https://")
        assert result is not None
        assert "host" in result.message


class TestValidateEntry:
    """Tests for validate_entry function."""

    def test_valid_stdio_entry(self):
        assert validate_entry(stdio("fs", args=["-y", "server"])) == []

    def test_valid_sse_entry(self):
        assert validate_entry(sse("remote")) == []

    def test_empty_name_is_error(self):
        errors = validate_entry(stdio(""))
        assert has_errors(errors)
        assert "name" in errors[0].message

    def test_blank_command_is_error(self):
        errors = validate_entry(stdio("broken", command="  "))
        assert has_errors(errors)
        assert errors[0].server_name == "broken"

    def test_empty_url_is_error(self):
        errors = validate_entry(sse("remote", url=""))
        assert has_errors(errors)
        assert "URL is required" in errors[0].message

    def test_bad_url_is_error(self):
        assert has_errors(validate_entry(sse("remote", url="not a url")))

    def test_unset_env_var_in_args_warns(self, monkeypatch):
        """Test that unset env var in args generates a warning, not an error."""
        monkeypatch.delenv("MCPMGR_TEST_UNSET_VAR", raising=False)

        errors = validate_entry(stdio("test", args=["${MCPMGR_TEST_UNSET_VAR}/script.py"]))
        assert len(errors) == 1
        assert errors[0].severity == "warning"
        assert "MCPMGR_TEST_UNSET_VAR" in errors[0].message
        assert "args" in errors[0].message
        assert not has_errors(errors)

    def test_unset_env_var_in_env_dict_warns(self, monkeypatch):
        monkeypatch.delenv("MCPMGR_TEST_DICT_VAR", raising=False)

        errors = validate_entry(stdio("test", env={"API_KEY": "${MCPMGR_TEST_DICT_VAR}"}))
        assert len(errors) == 1
        assert "env.API_KEY" in errors[0].message

    def test_set_env_var_no_warning(self, monkeypatch):
        monkeypatch.setenv("MCPMGR_TEST_SET_VAR", "/test/path")

        errors = validate_entry(stdio("test", args=["${MCPMGR_TEST_SET_VAR}/script.py"]))
        assert errors == []

    def test_command_lookup_only_when_asked(self):
        entry = stdio("test", command="definitely_not_a_real_command_xyz123")
        assert validate_entry(entry) == []

        errors = validate_entry(entry, check_commands=True)
        assert len(errors) == 1
        assert errors[0].severity == "warning"


class TestValidationError:
    """Tests for ValidationError dataclass."""

    def test_is_frozen(self):
        err = ValidationError(server_name="s", message="m", severity="error")
        with pytest.raises(AttributeError):
            err.message = "changed"  # type: ignore[misc]

    def test_has_errors_ignores_warnings(self):
        warning = ValidationError(server_name="s", message="m", severity="warning")
        assert not has_errors([warning])
        assert has_errors([warning, ValidationError("s", "m", "error")])
