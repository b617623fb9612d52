"""Tests for configuration loading."""

from datetime import timedelta

import pytest

from prwatch_core.config import config_directory, load_config, refresh_ttl, session_selection


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["author"] is None
    assert config["repositories"] == []
    assert config["ttl_minutes"] == 5
    assert config["fetcher"] == "gh"
    assert config["store"] == "json"
    assert config["port"] == 7192


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".watch.yml"
    cfg.write_text("author: alice\nttl_minutes: 2\nrepositories:\n  - org/r1\n  - org/r2\n")
    config = load_config(config_path=str(cfg))
    assert config["author"] == "alice"
    assert config["ttl_minutes"] == 2
    assert config["repositories"] == ["org/r1", "org/r2"]


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".watch.yml"
    cfg.write_text("session_name: work\n")
    config = load_config(config_path=str(cfg), cli_overrides={"session_name": "home"})
    assert config["session_name"] == "home"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".watch.yml"
    cfg.write_text("session_name: work\n")
    config = load_config(config_path=str(cfg), cli_overrides={"session_name": None})
    assert config["session_name"] == "work"


def test_env_vars_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("PRWATCH_STATE_FILE", str(tmp_path / "state.json"))
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["store_path"] == str(tmp_path / "state.json")


def test_repositories_list_is_not_shared_reference(tmp_path):
    """Mutating one config's repositories must not affect another."""
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["repositories"].append("org/r1")
    assert config_b["repositories"] == []


def test_session_selection_built_from_config():
    selection = session_selection({"author": "alice", "repositories": ["org/r1", "org/r1", "org/r2"]})
    assert selection.author == "alice"
    assert selection.repositories == frozenset({"org/r1", "org/r2"})


def test_session_selection_requires_author():
    with pytest.raises(ValueError, match="author"):
        session_selection({"author": None, "repositories": ["org/r1"]})


def test_refresh_ttl_from_minutes():
    assert refresh_ttl({"ttl_minutes": 2}) == timedelta(minutes=2)
    assert refresh_ttl({}) == timedelta(minutes=5)


def test_negative_ttl_rejected():
    with pytest.raises(ValueError):
        refresh_ttl({"ttl_minutes": -1})


def test_config_directory_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert config_directory() == tmp_path / "prwatch"


def test_config_directory_falls_back_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config_directory() == tmp_path / ".config" / "prwatch"


@pytest.mark.parametrize("bad", ["5", None, True, [5]])
def test_non_numeric_ttl_rejected(bad):
    with pytest.raises(ValueError, match="ttl_minutes"):
        refresh_ttl({"ttl_minutes": bad})
