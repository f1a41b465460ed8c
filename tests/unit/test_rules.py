"""
Client rules loading tests.

Verifies rules.yaml parsing, fenced documents, schema validation and
environment overrides.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from blogsync.rules.loader import (
    ENV_API_URL,
    ENV_CREDENTIAL_PATH,
    ENV_RULES_PATH,
    default_rules,
    load_rules,
    resolve_rules,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_API_URL, ENV_CREDENTIAL_PATH, ENV_RULES_PATH):
        monkeypatch.delenv(name, raising=False)


class TestLoadRules:
    """Test rules file loading."""

    def test_load_project_rules_file(self) -> None:
        """The shipped rules.yaml loads and matches the defaults."""
        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        assert rules == default_rules()
        assert rules.api.base_url == "http://localhost:5000/api"
        assert rules.validation.password_min_length == 6

    def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/rules.yaml"))

    def test_partial_file_fills_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("api:\n  base_url: https://blog.example.com/api\n")

        rules = load_rules(path)

        assert rules.api.base_url == "https://blog.example.com/api"
        assert rules.api.timeout_seconds == 15.0
        assert rules.pagination.default_limit == 10

    def test_fenced_yaml_block(self, tmp_path: Path) -> None:
        """Rules embedded in a markdown document are extracted from the fence."""
        path = tmp_path / "rules.md"
        path.write_text(
            "# Client rules\n\n```yaml\npagination:\n  default_limit: 25\n```\n\nNotes.\n"
        )

        rules = load_rules(path)

        assert rules.pagination.default_limit == 25

    def test_invalid_yaml_raises_value_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("api: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_schema_violation_raises_value_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("pagination:\n  default_limit: 0\n")

        with pytest.raises(ValueError, match="validation failed"):
            load_rules(path)


class TestEnvironmentOverrides:
    """Environment variables win over the file."""

    def test_api_url_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_API_URL, "http://staging:5000/api")

        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        assert rules.api.base_url == "http://staging:5000/api"

    def test_credential_path_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_CREDENTIAL_PATH, "/tmp/cred.json")

        assert default_rules().storage.credential_path == "/tmp/cred.json"

    def test_resolve_uses_rules_path_env(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("routes:\n  login: /sign-in\n")
        monkeypatch.setenv(ENV_RULES_PATH, str(path))

        assert resolve_rules().routes.login == "/sign-in"

    def test_resolve_without_file_uses_defaults(self) -> None:
        assert resolve_rules() == default_rules()
