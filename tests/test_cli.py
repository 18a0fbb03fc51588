"""Tests for argument parsing and config assembly in the CLI."""

from pathlib import Path

import pytest

from metal_price_scraper.cli import build_config, build_parser, print_check
from metal_price_scraper.core.config import ContentShape


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "METAL_SCRAPER_URLS", "METAL_SCRAPER_TIMEOUT", "METAL_SCRAPER_MAX_ATTEMPTS",
        "METAL_SCRAPER_BACKOFF", "METAL_SCRAPER_INTERVAL", "METAL_SCRAPER_CSV",
        "METAL_SCRAPER_JSON", "METAL_SCRAPER_SCALE", "METAL_SCRAPER_CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)


def config_for(*argv):
    return build_config(build_parser().parse_args(list(argv)))


class TestBuildConfig:

    def test_default_command_is_run(self):
        assert build_parser().parse_args([]).command == "run"

    def test_defaults(self):
        config = config_for("once")
        assert config.sources[0].url == "https://www.goldr.org"
        assert config.max_attempts == 3

    def test_urls_in_order(self):
        config = config_for(
            "once", "--url", "https://a.example", "--url", "https://b.example|embedded",
            "--timeout", "5",
        )
        assert [s.url for s in config.sources] == ["https://a.example", "https://b.example"]
        assert config.sources[1].shape == ContentShape.EMBEDDED
        assert all(s.timeout == 5 for s in config.sources)

    def test_timeout_without_urls(self):
        config = config_for("check", "--timeout", "3")
        assert config.sources[0].url == "https://www.goldr.org"
        assert config.sources[0].timeout == 3

    def test_overrides(self, tmp_path):
        config = config_for(
            "run", "--max-attempts", "5", "--backoff", "0", "--interval", "60",
            "--csv", str(tmp_path / "p.csv"), "--json", str(tmp_path / "p.json"),
        )
        assert config.max_attempts == 5
        assert config.backoff_seconds == 0
        assert config.interval_seconds == 60
        assert config.csv_path == Path(tmp_path / "p.csv")
        assert config.json_path == Path(tmp_path / "p.json")

    def test_environment_is_the_base(self, monkeypatch):
        monkeypatch.setenv("METAL_SCRAPER_MAX_ATTEMPTS", "7")
        assert config_for("once").max_attempts == 7
        assert config_for("once", "--max-attempts", "2").max_attempts == 2

    def test_invalid_shape(self):
        with pytest.raises(ValueError):
            config_for("once", "--url", "https://a.example|pdf")


class TestPrintCheck:

    def test_all_reachable(self, capsys):
        ok = print_check([{
            "url": "https://a.example", "reachable": True, "status_code": 200,
            "status": "200 OK", "content_type": "text/html", "content_length": "10",
            "error": None,
        }])
        assert ok
        assert "Website is accessible" in capsys.readouterr().out

    def test_unreachable_or_error_status(self):
        assert not print_check([{
            "url": "https://a.example", "reachable": False, "status_code": None,
            "status": "", "content_type": "", "content_length": "", "error": "refused",
        }])
        assert not print_check([{
            "url": "https://a.example", "reachable": True, "status_code": 503,
            "status": "503 Service Unavailable", "content_type": "", "content_length": "",
            "error": None,
        }])
