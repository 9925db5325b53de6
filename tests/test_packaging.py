from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")
setuptools = pytest.importorskip("setuptools")

ROOT = Path(__file__).resolve().parents[1]


def test_installed_packages_cover_the_import_roots():
    pyproject = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    find = pyproject["tool"]["setuptools"]["packages"]["find"]

    packages = set(setuptools.find_namespace_packages(where=str(ROOT / find["where"][0]), include=find["include"]))

    # create_app imports the top-level config package and the nested app package
    assert {"config", "src.hojaverde.hojaverde", "src.hojaverde.hojaverde.attendance"} <= packages
    assert not any(p == "tests" or p.startswith("tests.") for p in packages)
