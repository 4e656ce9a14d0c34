"""Tests for the bulletin CLI."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from src.bulletin_bot import cli, load_articles
from src.clients.images import ImageResolver


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def articles_file(tmp_path):
    path = tmp_path / "articles.json"
    path.write_text(
        json.dumps(
            {
                "news": [
                    {
                        "id": i,
                        "title": f"Article {i} headline",
                        "description": "A short summary.",
                        "url": f"https://example.com/news/{i}",
                        "publishedAt": "2026-01-0%d" % i,
                    }
                    for i in range(1, 4)
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_cli_group_exists(runner):
    """Test that the CLI group is properly defined."""
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Bulletin generator CLI." in result.output
    for command in ("render", "resolve-image", "serve"):
        assert command in result.output


def test_load_articles_accepts_bare_list(tmp_path):
    path = tmp_path / "list.json"
    path.write_text(json.dumps([{"id": 1, "title": "Only one"}]), encoding="utf-8")

    articles = load_articles(path)

    assert [article.title for article in articles] == ["Only one"]


def test_render_writes_pdf(runner, articles_file, tmp_path):
    output = tmp_path / "out.pdf"

    result = runner.invoke(cli, ["render", str(articles_file), "-o", str(output), "--no-images"])

    assert result.exit_code == 0, result.output
    assert output.read_bytes().startswith(b"%PDF")


def test_render_estimate_strategy(runner, articles_file, tmp_path):
    output = tmp_path / "out.pdf"

    result = runner.invoke(
        cli,
        ["render", str(articles_file), "-o", str(output), "--no-images", "--toc-strategy", "estimate"],
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_render_empty_selection(runner, tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"news": []}), encoding="utf-8")

    result = runner.invoke(cli, ["render", str(path), "-o", str(tmp_path / "out.pdf"), "--no-images"])

    assert result.exit_code == 2
    assert not (tmp_path / "out.pdf").exists()


def test_render_invalid_file(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["render", str(path), "--no-images"])

    assert result.exit_code == 2


def test_resolve_image(runner):
    lookup = AsyncMock(return_value="https://cdn.example.com/cover.jpg")
    with patch.object(ImageResolver, "find_image_url", new=lookup):
        result = runner.invoke(cli, ["resolve-image", "https://example.com/a"])

    assert result.exit_code == 0
    assert "https://cdn.example.com/cover.jpg" in result.output


@pytest.fixture
def restore_root_level():
    level = logging.getLogger().level
    yield
    logging.getLogger().setLevel(level)


@pytest.mark.usefixtures("restore_root_level")
def test_log_level_from_settings(runner, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("DEBUG", raising=False)
    with patch.object(ImageResolver, "find_image_url", new=AsyncMock(return_value=None)):
        result = runner.invoke(cli, ["resolve-image", "https://example.com/a"])

    assert result.exit_code == 0
    assert logging.getLogger().level == logging.WARNING


@pytest.mark.usefixtures("restore_root_level")
def test_debug_flag_overrides_log_level(runner, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    with patch.object(ImageResolver, "find_image_url", new=AsyncMock(return_value=None)):
        result = runner.invoke(cli, ["--debug", "resolve-image", "https://example.com/a"])

    assert result.exit_code == 0
    assert logging.getLogger().level == logging.DEBUG
