from __future__ import annotations

import asyncio
import logging
import os

from conftest import RecordingSurface
from poster_client.exporter import export_raster
from poster_client.poster import PosterCanvas
from poster_client.results import Failure, Success


def test_export_flushes_then_saves(tmp_path):
    surface = RecordingSurface()
    canvas = PosterCanvas(surface)
    target = str(tmp_path / "out.png")
    result = asyncio.run(canvas.to_image(path=target))
    assert result == Success({"path": target})
    assert surface.names() == ["commit", "save_to_file"]
    assert surface.args_of("commit") == [(False,)]


def test_export_defaults_to_temporary_file():
    surface = RecordingSurface()
    result = asyncio.run(export_raster(PosterCanvas(surface), file_type="jpg", quality=0.8))
    path = result.value["path"]
    try:
        assert path.endswith(".jpg")
        assert surface.args_of("save_to_file")[0][1:3] == ("jpg", 0.8)
    finally:
        os.remove(path)


def test_export_region_defaults_to_surface_extent(tmp_path):
    surface = RecordingSurface(width=400, height=300)
    asyncio.run(export_raster(PosterCanvas(surface), path=str(tmp_path / "a.png"), x=100, y=50))
    _, _, _, region, dest = surface.args_of("save_to_file")[0]
    assert region == (100.0, 50.0, 300.0, 250.0)
    assert dest is None


def test_export_failure_is_returned_not_raised(tmp_path):
    surface = RecordingSurface()
    surface.fail_on = "save_to_file"
    result = asyncio.run(PosterCanvas(surface).to_image(path=str(tmp_path / "x.png")))
    assert isinstance(result, Failure)
    assert isinstance(result.error, RuntimeError)
    # callers that do not check the result shape still receive a value
    assert result.unwrap_or(None) is None


def test_flush_waits_for_surface_completion():
    surface = RecordingSurface()
    surface.defer_commit = True
    canvas = PosterCanvas(surface)

    async def scenario():
        task = asyncio.ensure_future(canvas.flush(reserve=True))
        await asyncio.sleep(0)
        assert not task.done()
        surface.commit_callbacks.pop()()
        await task

    asyncio.run(scenario())
    assert surface.args_of("commit") == [(True,)]


def test_overlapping_flush_is_logged(caplog):
    surface = RecordingSurface()
    surface.defer_commit = True
    canvas = PosterCanvas(surface)
    logger = logging.getLogger("ModernPoster.Client")

    async def scenario():
        first = asyncio.ensure_future(canvas.flush())
        await asyncio.sleep(0)
        second = asyncio.ensure_future(canvas.flush())
        await asyncio.sleep(0)
        for callback in list(surface.commit_callbacks):
            callback()
        await asyncio.gather(first, second)

    with caplog.at_level(logging.WARNING, logger=logger.name):
        asyncio.run(scenario())
    assert "still pending" in caplog.text
    assert len(surface.args_of("commit")) == 2
