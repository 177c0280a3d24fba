"""Tests for the idforge CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from idforge import TypeTag, parse
from idforge.cli.main import cli

runner = CliRunner()

UUID_V4 = "550e8400-e29b-41d4-a716-446655440000"
UUID_V7 = "017f22e2-79b0-7cc3-98c4-dc0c0c07398f"
UUID_V7_LATER = "017f22e2-7d98-7000-8000-000000000000"
ULID = "01ARZ3NDEKTSV4RRFFQ69G5FAV"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every command where no idforge.toml is found."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestGen:
    """Tests for `idforge gen`."""

    def test_default_uuidv4(self) -> None:
        """Test the default type is uuidv4."""
        result = runner.invoke(cli, ["gen"])

        assert result.exit_code == 0
        assert parse(result.output.strip()).tag is TypeTag.UUID_V4

    def test_count(self) -> None:
        """Test generating several monotonic IDs."""
        result = runner.invoke(cli, ["gen", "ulid", "-n", "5"])

        lines = result.output.split()
        assert result.exit_code == 0
        assert len(lines) == 5
        assert lines == sorted(lines)

    def test_json(self) -> None:
        """Test JSON output."""
        result = runner.invoke(
            cli, ["gen", "snowflake", "--epoch", "twitter", "--worker-id", "3", "--json"]
        )

        data = json.loads(result.output)
        assert result.exit_code == 0
        assert data["id_type"] == "snowflake"
        assert len(data["ids"]) == 1

    def test_name_based(self) -> None:
        """Test UUID v5 generation."""
        result = runner.invoke(
            cli, ["gen", "uuidv5", "--namespace", "dns", "--name", "python.org"]
        )

        assert result.output.strip() == "886313e1-3b8a-5372-9b90-0c9aee199e5d"

    def test_name_based_missing_options(self) -> None:
        """Test v5 without a namespace fails."""
        result = runner.invoke(cli, ["gen", "uuidv5"])

        assert result.exit_code == 1
        assert "--namespace" in result.output

    def test_format_and_case(self) -> None:
        """Test output encoding and case."""
        result = runner.invoke(cli, ["gen", "uuid-nil", "--format", "hex", "--case", "upper"])

        assert result.output.strip() == "0" * 32

    @pytest.mark.parametrize(
        "args",
        [
            ["gen", "guid"],
            ["gen", "snowflake", "--worker-id", "32"],
            ["gen", "ksuid", "--case", "upper"],
            ["gen", "--count", "0"],
            ["gen", "typeid", "--prefix", "Bad"],
        ],
    )
    def test_errors(self, args: list[str]) -> None:
        """Test invalid requests exit with status 1."""
        result = runner.invoke(cli, args)

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestInspect:
    """Tests for `idforge inspect`."""

    def test_text(self) -> None:
        """Test human-readable output."""
        result = runner.invoke(cli, ["inspect", UUID_V7])

        assert result.exit_code == 0
        assert "ID Type:     uuidv7" in result.output
        assert "2022-02-22T19:22:22.000Z" in result.output

    def test_json(self) -> None:
        """Test JSON output."""
        result = runner.invoke(cli, ["inspect", UUID_V4, "--json"])

        data = json.loads(result.output)
        assert data["id_type"] == "uuidv4"
        assert data["version"] == 4

    def test_snowflake_epoch(self) -> None:
        """Test the --epoch option."""
        result = runner.invoke(cli, ["inspect", "1541815603606036480", "--epoch", "twitter"])

        assert "2022-06-28T16:07:40.105Z" in result.output

    def test_undashed_uuid_hint(self) -> None:
        """Test failed detection shows the remediation hint."""
        result = runner.invoke(cli, ["inspect", UUID_V4.replace("-", "")])

        assert result.exit_code == 1
        assert "without dashes" in result.output

    def test_type_hint(self) -> None:
        """Test --type parses undashed UUIDs."""
        result = runner.invoke(cli, ["inspect", UUID_V4.replace("-", ""), "--type", "uuid"])

        assert result.exit_code == 0
        assert f"Canonical:   {UUID_V4}" in result.output

    def test_ambiguous(self) -> None:
        """Test ambiguous input suggests a type hint."""
        result = runner.invoke(cli, ["inspect", ULID.lower()])

        assert result.exit_code == 1
        assert "--type ulid" in result.output


class TestConvert:
    """Tests for `idforge convert`."""

    def test_to_int(self) -> None:
        """Test conversion to an integer."""
        result = runner.invoke(cli, ["convert", UUID_V4, "--to", "int"])

        assert result.output.strip() == "113059749145936325402354257176981405696"

    def test_from_base64(self) -> None:
        """Test conversion from a non-canonical encoding."""
        result = runner.invoke(
            cli,
            ["convert", "VQ6EAOKbQdSnFkRmVUQAAA==", "--from", "base64", "--type", "uuid",
             "--to", "canonical"],
        )

        assert result.output.strip() == UUID_V4

    def test_from_requires_type(self) -> None:
        """Test non-canonical sources need --type."""
        result = runner.invoke(cli, ["convert", "AAAA", "--from", "base64", "--to", "hex"])

        assert result.exit_code == 1
        assert "--type" in result.output


class TestValidate:
    """Tests for `idforge validate`."""

    def test_mixed(self) -> None:
        """Test one valid and one invalid ID."""
        result = runner.invoke(cli, ["validate", UUID_V4, "nope"])

        assert result.exit_code == 1
        assert f"✓ Valid uuidv4: {UUID_V4}" in result.output
        assert "✗ Invalid: nope" in result.output

    def test_quiet(self) -> None:
        """Test --quiet prints nothing."""
        result = runner.invoke(cli, ["validate", "--quiet", UUID_V4, ULID])

        assert result.exit_code == 0
        assert result.output == ""

    def test_json(self) -> None:
        """Test JSON output."""
        result = runner.invoke(cli, ["validate", "--json", "cjld2cjxh0000qzrmn831i7rn"])

        data = json.loads(result.output)
        assert data[0]["input"] == "cjld2cjxh0000qzrmn831i7rn"
        assert data[0]["id_type"] == "cuid"
        assert data[0]["warnings"]

    def test_ambiguous_is_valid(self) -> None:
        """Test ambiguous IDs count as valid."""
        result = runner.invoke(cli, ["validate", ULID.lower()])

        assert result.exit_code == 0
        assert "Valid ambiguous" in result.output

    def test_strict(self) -> None:
        """Test --strict rejects non-canonical text."""
        result = runner.invoke(cli, ["validate", "--strict", UUID_V4.upper()])

        assert result.exit_code == 1
        assert f"Canonical form: {UUID_V4}" in result.output


class TestCompare:
    """Tests for `idforge compare`."""

    def test_uuid_v7(self) -> None:
        """Test two UUIDv7s one second apart."""
        result = runner.invoke(cli, ["compare", UUID_V7, UUID_V7_LATER])

        assert result.exit_code == 0
        assert "Binary:        less" in result.output
        assert "Chronological: less" in result.output
        assert "Time diff:     1000 ms" in result.output

    def test_json(self) -> None:
        """Test JSON output."""
        result = runner.invoke(cli, ["compare", UUID_V7_LATER, UUID_V7, "--json"])

        data = json.loads(result.output)
        assert data["chronological_order"] == "greater"
        assert data["time_diff_ms"] == 1000.0

    def test_type_mismatch(self) -> None:
        """Test different types produce a warning."""
        result = runner.invoke(cli, ["compare", ULID, UUID_V7])

        assert result.exit_code == 0
        assert "Warning: Comparing different ID types" in result.output


class TestInfo:
    """Tests for `idforge info`."""

    def test_all(self) -> None:
        """Test every registered type is listed."""
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        for name in ("uuidv7", "ulid", "snowflake", "tsid", "cuid2"):
            assert name in result.output

    def test_one_json(self) -> None:
        """Test the JSON description of one type."""
        result = runner.invoke(cli, ["info", "ulid", "--json"])

        data = json.loads(result.output)
        assert data["bits"] == 128
        assert [f["name"] for f in data["fields"]] == ["timestamp", "randomness"]

    def test_unknown(self) -> None:
        """Test unknown types fail."""
        result = runner.invoke(cli, ["info", "guid"])

        assert result.exit_code == 1


class TestConfigOption:
    """Tests for the --config option."""

    def test_strict_from_config(self, isolated_cwd: Path) -> None:
        """Test strict_mode from the config file applies to validate."""
        path = isolated_cwd / "custom.toml"
        path.write_text("[detection]\nstrict_mode = true\n")

        result = runner.invoke(cli, ["--config", str(path), "validate", UUID_V4.upper()])

        assert result.exit_code == 1

    def test_found_upwards(self, isolated_cwd: Path) -> None:
        """Test idforge.toml in the working directory is picked up."""
        (isolated_cwd / "idforge.toml").write_text("[snowflake]\nepoch = \"twitter\"\n")

        result = runner.invoke(cli, ["inspect", "1541815603606036480"])

        assert "2022-06-28T16:07:40.105Z" in result.output

    def test_invalid_config(self, isolated_cwd: Path) -> None:
        """Test an invalid config file fails cleanly."""
        path = isolated_cwd / "bad.toml"
        path.write_text('log_level = "LOUD"\n')

        result = runner.invoke(cli, ["--config", str(path), "info"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
