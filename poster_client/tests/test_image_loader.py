from __future__ import annotations

import asyncio
from pathlib import Path

from poster_client import image_loader
from poster_client.image_loader import ImageFetcher, cache_path_for, is_remote, load_images
from poster_client.results import Failure, Success


def test_is_remote_recognises_http_schemes():
    assert is_remote("https://example.com/a.png")
    assert is_remote("HTTP://example.com/a.png")
    assert not is_remote("/tmp/a.png")
    assert not is_remote("wxfile://a.png")


def test_output_order_matches_input_regardless_of_completion_order():
    delays = {"https://x/slow.png": 0.05, "https://x/fast.png": 0.0}

    async def fetch(source: str) -> str:
        await asyncio.sleep(delays.get(source, 0.0))
        return "/cache/" + source.rsplit("/", 1)[-1]

    result = asyncio.run(
        load_images(["https://x/slow.png", "", "local.png", "https://x/fast.png"], fetch=fetch)
    )
    assert result == Success(["/cache/slow.png", "", "local.png", "/cache/fast.png"])


def test_single_failure_is_returned_as_value():
    boom = OSError("network down")

    async def fetch(source: str) -> str:
        if "bad" in source:
            raise boom
        return source

    result = asyncio.run(load_images(["https://x/ok.png", "https://x/bad.png"], fetch=fetch))
    assert isinstance(result, Failure)
    assert result.error is boom
    assert not result.ok
    assert result.unwrap_or([]) == []


def test_empty_batch_succeeds():
    result = asyncio.run(load_images([], fetch=None))
    assert result.ok
    assert result.value == []


def test_default_fetcher_downloads_remote_into_cache(tmp_path, monkeypatch):
    downloads = []

    def fake_download(url: str, destination: Path, timeout: float = 30.0) -> None:
        downloads.append((url, destination, timeout))
        destination.write_bytes(b"png")

    monkeypatch.setattr(image_loader, "download_file", fake_download)
    url = "https://cdn.example.com/img/photo.PNG?size=large"
    result = asyncio.run(load_images([url, url], cache_dir=str(tmp_path), timeout=5))
    expected = cache_path_for(url, tmp_path)
    assert result.ok
    assert result.value == [str(expected), str(expected)]
    assert expected.suffix == ".png"
    assert downloads[0] == (url, expected, 5)


def test_default_fetcher_reuses_cached_file(tmp_path, monkeypatch):
    url = "https://cdn.example.com/cached.jpg"
    cached = cache_path_for(url, tmp_path)
    cached.write_bytes(b"jpg")

    def fail_download(*_args, **_kwargs):
        raise AssertionError("should not download")

    monkeypatch.setattr(image_loader, "download_file", fail_download)
    path = asyncio.run(ImageFetcher(cache_dir=str(tmp_path))(url))
    assert path == str(cached)


def test_missing_local_file_fails_the_batch(tmp_path):
    present = tmp_path / "here.png"
    present.write_bytes(b"x")
    ok = asyncio.run(load_images([str(present)]))
    assert ok == Success([str(present)])
    missing = asyncio.run(load_images([str(present), str(tmp_path / "gone.png")]))
    assert isinstance(missing.error, FileNotFoundError)
