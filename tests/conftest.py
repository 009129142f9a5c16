"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from articleparser.transformations import TransformationRegistry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def no_title_html() -> str:
    return _read_fixture("no_title.html")


@pytest.fixture
def no_links_html() -> str:
    return _read_fixture("no_links.html")


@pytest.fixture
def short_article_html() -> str:
    return _read_fixture("short_article.html")


@pytest.fixture
def jsonld_html() -> str:
    return _read_fixture("jsonld.html")


@pytest.fixture
def registry() -> TransformationRegistry:
    """A private registry so hook tests never touch the process-wide one."""
    return TransformationRegistry()
