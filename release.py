"""
Keeps the eventstore version constants in line with pyproject.toml.

    python release.py          # write the pyproject version into the package
    python release.py --check  # exit 1 if the two disagree
"""

import argparse
import re
import sys
from pathlib import Path
from typing import Optional


ROOT = Path(__file__).parent
TOML_PATH = ROOT / "pyproject.toml"
PACKAGE_INIT_PATH = ROOT / "eventstore" / "__init__.py"

Version = tuple[int, int, int]

_CONSTANT_PATTERN = r"^version_{part}\s*=\s*(\d+)\s*$"
_PARTS = ("major", "minor", "patch")


def parse_version(version_str: str) -> Version:
    """Parse 'X.Y.Z', optionally quoted, into a tuple."""
    match = re.fullmatch(r"(\d+)\.(\d+)\.(\d+)", version_str.strip("\"'"))
    if not match:
        raise ValueError(f"Invalid version format: {version_str}")
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def format_version(version: Version) -> str:
    return ".".join(str(part) for part in version)


def read_project_version(toml_path: Path = TOML_PATH) -> Version:
    """The version declared in the [project] table."""
    content = toml_path.read_text(encoding="utf-8")
    match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE)
    if not match:
        raise ValueError(f"No version field found in {toml_path.name}")
    return parse_version(match.group(1))


def read_package_version(init_path: Path = PACKAGE_INIT_PATH) -> Version:
    """The version spelled by the version_major/minor/patch constants."""
    content = init_path.read_text(encoding="utf-8")
    parts = []
    for part in _PARTS:
        match = re.search(_CONSTANT_PATTERN.format(part=part), content, re.MULTILINE)
        if not match:
            raise ValueError(f"version_{part} not found in {init_path.name}")
        parts.append(int(match.group(1)))
    return parts[0], parts[1], parts[2]


def write_package_version(version: Version, init_path: Path = PACKAGE_INIT_PATH) -> None:
    """Rewrite the version constants in place, leaving the rest untouched."""
    content = init_path.read_text(encoding="utf-8")
    for part, number in zip(_PARTS, version):
        content, count = re.subn(
            _CONSTANT_PATTERN.format(part=part),
            f"version_{part} = {number}",
            content,
            flags=re.MULTILINE,
        )
        if count != 1:
            raise ValueError(f"Expected one version_{part} in {init_path.name}")
    init_path.write_text(content, encoding="utf-8")


def main(
    argv: Optional[list[str]] = None,
    toml_path: Path = TOML_PATH,
    init_path: Path = PACKAGE_INIT_PATH,
) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--check",
        action="store_true",
        help="only compare the versions, exit 1 when they differ",
    )
    args = parser.parse_args(argv)

    project = read_project_version(toml_path)
    package = read_package_version(init_path)

    if project == package:
        print(f"eventstore {format_version(package)} is in sync")
        return 0

    if args.check:
        print(
            f"pyproject.toml says {format_version(project)}, "
            f"package says {format_version(package)}",
            file=sys.stderr,
        )
        return 1

    write_package_version(project, init_path)
    print(f"eventstore {format_version(package)} -> {format_version(project)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
