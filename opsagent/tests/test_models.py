"""Tests for BinaryLocator and ProcessSpec.

The locator accepts the legacy "<working_dir> <executable>" string form and
the structured form. Anything ambiguous is rejected with InvalidInputError
rather than silently truncated.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from opsagent.cmd.errors import InvalidInputError
from opsagent.cmd.models import BinaryLocator, ProcessSpec


class TestBinaryLocatorParse:
    """BinaryLocator.parse() splits the legacy string form on whitespace."""

    def test_single_token_is_executable(self):
        locator = BinaryLocator.parse("terraform")
        assert locator.executable == "terraform"
        assert locator.working_dir is None

    def test_two_tokens_are_dir_then_executable(self):
        locator = BinaryLocator.parse("/srv/infra terraform")
        assert locator.working_dir == "/srv/infra"
        assert locator.executable == "terraform"

    def test_extra_whitespace_is_ignored(self):
        locator = BinaryLocator.parse("  /srv/infra \t terraform \n")
        assert locator.working_dir == "/srv/infra"
        assert locator.executable == "terraform"

    def test_three_tokens_rejected(self):
        with pytest.raises(InvalidInputError, match="3 tokens"):
            BinaryLocator.parse("/srv/infra terraform plan")

    def test_empty_rejected(self):
        with pytest.raises(InvalidInputError, match="empty"):
            BinaryLocator.parse("")

    def test_whitespace_only_rejected(self):
        with pytest.raises(InvalidInputError):
            BinaryLocator.parse("   ")

    def test_bytes_decoded(self):
        locator = BinaryLocator.parse(b"/srv kubectl")
        assert locator.working_dir == "/srv"
        assert locator.executable == "kubectl"

    def test_invalid_utf8_bytes_rejected(self):
        with pytest.raises(InvalidInputError, match="UTF-8"):
            BinaryLocator.parse(b"\xff\xfebinary")

    def test_lone_surrogate_rejected(self):
        with pytest.raises(InvalidInputError):
            BinaryLocator.parse("bin\udcffary")

    def test_path_like_accepted(self):
        locator = BinaryLocator.parse(Path("/usr/bin/env"))
        assert locator.executable == "/usr/bin/env"

    def test_locator_passes_through(self):
        original = BinaryLocator(executable="helm")
        assert BinaryLocator.parse(original) is original

    def test_invalid_input_is_a_value_error(self):
        """Callers that only know about ValueError still catch malformed input."""
        with pytest.raises(ValueError):
            BinaryLocator.parse("")


class TestBinaryLocatorStructured:
    """The structured form is validated at construction."""

    def test_executable_with_spaces(self):
        locator = BinaryLocator(executable="/opt/My Tools/terraform", working_dir="/srv")
        assert locator.executable == "/opt/My Tools/terraform"

    def test_empty_executable_rejected(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            BinaryLocator(executable="")

    def test_empty_working_dir_rejected(self):
        with pytest.raises(ValidationError, match="Working directory"):
            BinaryLocator(executable="terraform", working_dir="")

    def test_nul_byte_rejected(self):
        with pytest.raises(ValidationError, match="NUL"):
            BinaryLocator(executable="terra\x00form")

    def test_frozen(self):
        locator = BinaryLocator(executable="terraform")
        with pytest.raises(ValidationError):
            locator.executable = "kubectl"

    def test_str_round_trips_legacy_form(self):
        assert str(BinaryLocator(executable="terraform", working_dir="/srv")) == "/srv terraform"
        assert str(BinaryLocator(executable="terraform")) == "terraform"

    def test_display_segment(self):
        assert BinaryLocator(executable="tf", working_dir="/srv").display_segment() == "/srv"
        assert BinaryLocator(executable="tf").display_segment() == "tf"


class TestProcessSpec:
    def test_argv(self):
        spec = ProcessSpec(executable="kubectl", args=("get", "pods"), cwd=None, env={})
        assert spec.argv == ("kubectl", "get", "pods")

    def test_default_overrides_empty(self):
        spec = ProcessSpec(executable="kubectl", args=(), cwd=None, env={})
        assert spec.env_overrides == ()
