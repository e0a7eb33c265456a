"""Checks that a plain `pytest` run collects this directory."""


def test_build_directory_not_skipped(pytestconfig):
    assert "build" not in pytestconfig.getini("norecursedirs")
    assert pytestconfig.getini("testpaths") == ["tests"]
