"""Unit tests for partial resolution."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from fastapi_view.config import RenderOptions
from fastapi_view.exceptions import ReadError
from fastapi_view.loader import TemplateLoader
from fastapi_view.partials import PartialResolver


@pytest.mark.asyncio
async def test_empty_partials_resolve_without_io():
    """Test an empty mapping resolves to {} without touching the loader."""
    loader = Mock(spec=TemplateLoader)
    loader.read = AsyncMock()

    assert await PartialResolver(loader).resolve_all({}) == {}
    loader.read.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_all_loads_every_partial(templates_dir):
    """Test all partials are loaded by path, without extension normalization."""
    resolver = PartialResolver(TemplateLoader(templates_dir))

    partials = await resolver.resolve_all(
        {"header": "partials/header.html", "footer": "partials/footer.html"}
    )

    assert partials == {"header": "<h1>{{ title }}</h1>", "footer": "<footer>{{ year }}</footer>"}


@pytest.mark.asyncio
async def test_resolve_all_does_not_normalize_extension(templates_dir):
    """Test a partial path without extension is read as given."""
    resolver = PartialResolver(TemplateLoader(templates_dir))

    with pytest.raises(ReadError):
        await resolver.resolve_all({"header": "partials/header"})


@pytest.mark.asyncio
async def test_failure_reported_after_all_loads_settle():
    """Test one failing load surfaces only after the others completed."""
    finished: list[str] = []

    async def read(path, requested_path=None):
        if path == "bad":
            raise ReadError(path, "boom")
        await asyncio.sleep(0.01)
        finished.append(path)
        return f"<{path}>"

    loader = Mock(spec=TemplateLoader)
    loader.read = read

    with pytest.raises(ReadError) as exc_info:
        await PartialResolver(loader).resolve_all({"a": "slow-a", "b": "bad", "c": "slow-c"})

    assert exc_info.value.path == "bad"
    assert sorted(finished) == ["slow-a", "slow-c"]


@pytest.mark.asyncio
async def test_first_error_in_mapping_order_wins():
    """Test the first failing entry of the mapping is the one reported."""

    async def read(path, requested_path=None):
        raise ReadError(path, "boom")

    loader = Mock(spec=TemplateLoader)
    loader.read = read

    with pytest.raises(ReadError) as exc_info:
        await PartialResolver(loader).resolve_all({"first": "one", "second": "two"})

    assert exc_info.value.path == "one"


@pytest.mark.asyncio
async def test_partials_are_minified_unless_excluded(templates_dir):
    """Test partial text goes through the minifier for non-excluded paths."""
    minify = Mock(side_effect=lambda html, **kwargs: html.upper())
    options = RenderOptions(use_html_minifier=minify, paths_to_exclude_html_minifier=["/raw"])
    resolver = PartialResolver(TemplateLoader(templates_dir, options=options))

    minified = await resolver.resolve_all({"header": "partials/header.html"}, "/")
    raw = await resolver.resolve_all({"header": "partials/header.html"}, "/raw")

    assert minified == {"header": "<H1>{{ TITLE }}</H1>"}
    assert raw == {"header": "<h1>{{ title }}</h1>"}
