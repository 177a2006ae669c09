"""Unit tests for synchronous configuration source readers."""

from pathlib import Path

import pytest

from pyboiler.config.sources import (
    env_overrides,
    find_config_file,
    load_config_file,
    parse_env_value,
)
from pyboiler.errors import SyncAssemblyError


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestLoadConfigFile:
    """Tests for load_config_file."""

    @pytest.mark.unit
    def test_load_yaml(self) -> None:
        """Test loading a YAML file."""
        data = load_config_file(FIXTURES_DIR / "config" / "default-config.yml")
        assert data["database"] == {"host": "localhost", "port": 5432}

    @pytest.mark.unit
    def test_load_json(self) -> None:
        """Test loading a JSON file."""
        data = load_config_file(FIXTURES_DIR / "extra" / "extra-override.json")
        assert data == {"database": {"host": "json-host", "user": "admin"}}

    @pytest.mark.unit
    def test_empty_file_is_empty_mapping(self, tmp_path: Path) -> None:
        """Test that an empty file contributes nothing."""
        empty = tmp_path / "empty.yml"
        empty.write_text("")
        assert load_config_file(empty) == {}

    @pytest.mark.unit
    def test_missing_file(self) -> None:
        """Test that a missing file is a SyncAssemblyError."""
        with pytest.raises(SyncAssemblyError, match="not found") as exc_info:
            load_config_file(FIXTURES_DIR / "extra" / "absent.yml")
        assert exc_info.value.source is not None
        assert exc_info.value.source.startswith("file:")

    @pytest.mark.unit
    def test_malformed_file(self) -> None:
        """Test that unparsable content is a SyncAssemblyError."""
        with pytest.raises(SyncAssemblyError, match="Invalid YAML"):
            load_config_file(FIXTURES_DIR / "extra" / "malformed.yml")

    @pytest.mark.unit
    def test_non_mapping_top_level(self) -> None:
        """Test that a list document is rejected."""
        with pytest.raises(SyncAssemblyError, match="must be a mapping"):
            load_config_file(FIXTURES_DIR / "extra" / "list.yml")


class TestFindConfigFile:
    """Tests for find_config_file."""

    @pytest.mark.unit
    def test_finds_yml(self) -> None:
        """Test lookup by stem."""
        found = find_config_file(FIXTURES_DIR / "config", "default-config")
        assert found == FIXTURES_DIR / "config" / "default-config.yml"

    @pytest.mark.unit
    def test_prefers_yml_over_json(self, tmp_path: Path) -> None:
        """Test extension precedence."""
        (tmp_path / "app-config.json").write_text("{}")
        (tmp_path / "app-config.yml").write_text("a: 1")
        assert find_config_file(tmp_path, "app-config") == tmp_path / "app-config.yml"

    @pytest.mark.unit
    def test_absent(self, tmp_path: Path) -> None:
        """Test that None is returned when nothing matches."""
        assert find_config_file(tmp_path, "default-config") is None


class TestEnvOverrides:
    """Tests for environment overrides."""

    @pytest.mark.unit
    def test_nested_keys(self) -> None:
        """Test double underscore nesting and lower-casing."""
        environ = {
            "PYBOILER__DATABASE__HOST": "db.internal",
            "PYBOILER__DATABASE__PORT": "6543",
            "PYBOILER__FEATURE": "true",
            "UNRELATED": "x",
            "PYBOILER_SUFFIX": "-test",
        }

        assert env_overrides(environ) == {
            "database": {"host": "db.internal", "port": 6543},
            "feature": True,
        }

    @pytest.mark.unit
    def test_empty_environment(self) -> None:
        """Test that no matching variables yield no overrides."""
        assert env_overrides({}) == {}
        assert env_overrides({"PYBOILER__": "ignored"}) == {}

    @pytest.mark.unit
    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the os.environ default."""
        monkeypatch.setenv("PYBOILER__FROM_PROCESS", "1")
        assert env_overrides()["from_process"] == 1

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("8080", 8080),
            ("false", False),
            ("1.5", 1.5),
            ("plain text", "plain text"),
            ("[1, 2]", "[1, 2]"),
            ("{a: 1}", "{a: 1}"),
            ("key: [unclosed", "key: [unclosed"),
        ],
    )
    def test_parse_env_value(self, raw: str, expected: object) -> None:
        """Test scalar parsing of environment values."""
        assert parse_env_value(raw) == expected
