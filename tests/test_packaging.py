"""Tests for the project metadata."""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def project():
    with open(ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)["project"]


class TestProjectMetadata:
    """Tests for pyproject.toml."""

    def test_no_design_notes_as_long_description(self, project):
        readme = project.get("readme")
        if readme is not None:
            assert readme != "DESIGN.md"
            assert (ROOT / readme).exists()

    def test_console_script(self, project):
        from ethnosonic import cli

        module, _, attr = project["scripts"]["ethnosonic"].partition(":")
        assert module == "ethnosonic.cli"
        assert callable(getattr(cli, attr))
