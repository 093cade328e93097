"""
Unit tests for the release helper that keeps the package version constants in
line with pyproject.toml.
"""

from pathlib import Path

import pytest

import eventstore
import release


def _write_files(tmp_path: Path, project: str, package: tuple) -> tuple[Path, Path]:
    toml_file = tmp_path / "pyproject.toml"
    toml_file.write_text(
        f'[project]\nname = "eventstore"\nversion = "{project}"\n'
        f'requires-python = ">=3.9"\n'
    )
    init_file = tmp_path / "__init__.py"
    init_file.write_text(
        '"""Docs mentioning version_major = 9."""\n'
        f"version_major = {package[0]}\n"
        f"version_minor = {package[1]}\n"
        f"version_patch = {package[2]}\n"
        '__version__ = f"{version_major}.{version_minor}.{version_patch}"\n'
    )
    return toml_file, init_file


def test_parse_version() -> None:
    """Test parsing plain and quoted version strings."""
    assert release.parse_version("1.2.3") == (1, 2, 3)
    assert release.parse_version('"10.0.7"') == (10, 0, 7)

    with pytest.raises(ValueError, match="Invalid version format"):
        release.parse_version("1.2")
    with pytest.raises(ValueError, match="Invalid version format"):
        release.parse_version("1.2.3rc1")


def test_repository_versions_agree() -> None:
    """Test that pyproject.toml and the package agree on the version."""
    assert release.read_project_version() == release.read_package_version()
    assert release.format_version(release.read_package_version()) == (
        eventstore.__version__
    )


def test_check_passes_when_in_sync(tmp_path: Path) -> None:
    """Test that --check succeeds and writes nothing when versions agree."""
    toml_file, init_file = _write_files(tmp_path, "1.4.2", (1, 4, 2))
    before = init_file.read_text()

    assert release.main(["--check"], toml_file, init_file) == 0
    assert init_file.read_text() == before


def test_check_fails_when_out_of_sync(
    tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    """Test that --check reports a mismatch without touching the package."""
    toml_file, init_file = _write_files(tmp_path, "2.0.0", (1, 4, 2))

    assert release.main(["--check"], toml_file, init_file) == 1
    assert release.read_package_version(init_file) == (1, 4, 2)
    assert "pyproject.toml says 2.0.0, package says 1.4.2" in capsys.readouterr().err


def test_sync_rewrites_only_the_constants(tmp_path: Path) -> None:
    """Test that syncing updates the constants and leaves other text alone."""
    toml_file, init_file = _write_files(tmp_path, "2.4.1", (1, 0, 0))

    assert release.main([], toml_file, init_file) == 0

    content = init_file.read_text()
    assert release.read_package_version(init_file) == (2, 4, 1)
    assert "Docs mentioning version_major = 9." in content
    assert '__version__ = f"{version_major}' in content


def test_missing_constant_is_reported(tmp_path: Path) -> None:
    """Test that a package file without every constant is rejected."""
    init_file = tmp_path / "__init__.py"
    init_file.write_text("version_major = 1\n")

    with pytest.raises(ValueError, match="version_minor not found"):
        release.read_package_version(init_file)
    with pytest.raises(ValueError, match="Expected one version_minor"):
        release.write_package_version((1, 2, 3), init_file)
