"""Tests for the depcheck command line."""

import json

import click
import pytest

from depcheck import __version__
from depcheck.__main__ import main

DUPLICATED_LOCK = """\
version = 3

[[package]]
name = "app"
version = "0.1.0"
dependencies = [
 "log",
 "rand 0.7.3",
 "rand 0.8.5",
]

[[package]]
name = "log"
version = "0.4.21"
source = "registry+https://github.com/rust-lang/crates.io-index"
dependencies = [
 "rand 0.8.5",
]

[[package]]
name = "rand"
version = "0.7.3"
source = "registry+https://github.com/rust-lang/crates.io-index"

[[package]]
name = "rand"
version = "0.8.5"
source = "registry+https://github.com/rust-lang/crates.io-index"
"""

CLEAN_LOCK = """\
version = 4

[[package]]
name = "app"
version = "0.1.0"
dependencies = [
 "log",
]

[[package]]
name = "log"
version = "0.4.21"
source = "registry+https://github.com/rust-lang/crates.io-index"
"""


@pytest.fixture
def lockfile(tmp_path):
    def write(content, name="Cargo.lock"):
        path = tmp_path / name
        path.write_text(content)
        return str(path)
    return write


class TestMain:
    """End-to-end runs of main() against lockfiles on disk."""

    def test_clean_lockfile(self, lockfile, capsys):
        """Test that a lockfile without duplicates exits 0."""
        code = main(["--lock-path", lockfile(CLEAN_LOCK), "--no-color"])

        assert code == 0
        assert capsys.readouterr().out == "No duplicate dependencies found.\n"

    def test_duplicates_fail(self, lockfile, capsys):
        """Test that duplicates are listed and exit 1."""
        code = main(["-l", lockfile(DUPLICATED_LOCK), "--no-color"])

        out = capsys.readouterr().out
        assert code == 1
        assert "Duplicate Package(s):" in out
        assert "  rand:" in out

    def test_blame_report(self, lockfile, capsys):
        """Test the full blame report with blamed packages and paths."""
        code = main(["-l", lockfile(DUPLICATED_LOCK), "--blame", "all", "-p", "-d", "top-level", "--color", "never"])

        out = capsys.readouterr().out
        assert code == 1
        assert "Top Level Packages with Multi Version Dependencies:" in out
        assert "  app 0.1.0 (direct: 1, indirect: 0)" in out
        assert (
            "    Direct:\n"
            "      rand\n"
            "        --> rand 0.7.3\n"
            "          rand 0.7.3\n"
            "        --> log 0.4.21, rand 0.8.5\n"
            "          rand 0.8.5\n"
        ) in out
        assert "      log 0.4.21\n        app 0.1.0\n" in out

    def test_color_always(self, lockfile, capsys):
        """Test that --color always keeps styling on captured output."""
        main(["-l", lockfile(DUPLICATED_LOCK), "--blame", "top-level", "--color", "always"])

        out = capsys.readouterr().out
        assert click.style("  app 0.1.0 (direct: 1, indirect: 0)", fg="red") in out

    def test_color_auto_is_plain_when_piped(self, lockfile, capsys):
        """Test that the default color mode strips styling off a terminal."""
        main(["-l", lockfile(DUPLICATED_LOCK), "--blame", "top-level"])

        out = capsys.readouterr().out
        assert "  app 0.1.0 (direct: 1, indirect: 0)\n" in out
        assert "\033[" not in out

    def test_fail_on_never(self, lockfile):
        """Test that --fail-on never always exits 0."""
        assert main(["-l", lockfile(DUPLICATED_LOCK), "--fail-on", "never", "--no-color"]) == 0

    def test_fail_on_direct(self, lockfile):
        """Test that --fail-on direct exits 1 only with direct blame."""
        assert main(["-l", lockfile(DUPLICATED_LOCK), "--fail-on", "direct", "--no-color"]) == 1
        assert main(["-l", lockfile(CLEAN_LOCK), "--fail-on", "direct", "--no-color"]) == 0

    def test_json_output(self, lockfile, capsys):
        """Test the JSON report of a Cargo.lock."""
        code = main(["-l", lockfile(DUPLICATED_LOCK), "--format", "json"])

        report = json.loads(capsys.readouterr().out)
        assert code == 1
        assert report["duplicates"][0]["name"] == "rand"
        assert report["top_level"][0]["purl"] == "pkg:cargo/app@0.1.0"

    def test_json_package_list(self, lockfile, capsys):
        """Test that a JSON package list gets generic package URLs."""
        content = json.dumps({"version": 1, "packages": [
            {"name": "app", "version": "0.1.0", "dependencies": ["x 1.0.0", "x 2.0.0"]},
            {"name": "x", "version": "1.0.0", "source": "registry"},
            {"name": "x", "version": "2.0.0", "source": "registry"},
        ]})

        code = main(["-l", lockfile(content, "packages.json"), "--format", "json"])

        report = json.loads(capsys.readouterr().out)
        assert code == 1
        assert report["top_level"][0]["purl"] == "pkg:generic/app@0.1.0"

    def test_missing_file(self, tmp_path, capsys):
        """Test that an unreadable path is reported on stderr."""
        code = main(["-l", str(tmp_path / "nope.lock")])

        assert code == 1
        assert "Error: Could not read" in capsys.readouterr().err

    def test_unsupported_version(self, lockfile, capsys):
        """Test that a legacy lockfile version is rejected."""
        code = main(["-l", lockfile(DUPLICATED_LOCK.replace("version = 3", "version = 2"))])

        assert code == 1
        assert "Unsupported cargo manifest version (v2)" in capsys.readouterr().err

    def test_corrupted_graph(self, lockfile, capsys):
        """Test that a dependency on an undeclared version is reported."""
        code = main(["-l", lockfile(CLEAN_LOCK.replace('"log",', '"log 9.9.9",'))])

        assert code == 1
        assert "Version '9.9.9' of 'log' not found" in capsys.readouterr().err

    def test_malformed_dependencies(self, lockfile, capsys):
        """Test that a malformed dependencies entry is reported as a manifest error."""
        code = main(["-l", lockfile(CLEAN_LOCK.replace('dependencies = [\n "log",\n]', 'dependencies = "log"'))])

        assert code == 1
        assert "must be a list" in capsys.readouterr().err

    def test_version_flag(self, capsys):
        """Test that --version prints the package version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
