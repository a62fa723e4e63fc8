"""Unit tests for config.py"""

import pytest

from mdcontent.config import load_config


def test_load_config_uses_env_db_url(monkeypatch):
    """MDCONTENT_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("MDCONTENT_DB_URL", "sqlite:///env.db")
    settings = load_config()
    assert settings.db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDCONTENT_DB_URL takes precedence over config.yaml db_url."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("db_url: 'sqlite:///project.db'\n")
    monkeypatch.setenv("MDCONTENT_DB_URL", "sqlite:///override.db")
    settings = load_config()
    assert settings.db_url == "sqlite:///override.db"


def test_load_config_reads_config_yaml(tmp_path, monkeypatch):
    """Values in config.yaml are applied when no env var overrides them."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MDCONTENT_POSTS_DIR", raising=False)
    (tmp_path / "config.yaml").write_text("posts_dir: blog\nwords_per_minute: 250\n")
    settings = load_config()
    assert settings.posts_dir == "blog"
    assert settings.words_per_minute == 250


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the MDCONTENT_DB_URL env var."""
    monkeypatch.setenv("MDCONTENT_DB_URL", "sqlite:///env.db")
    settings = load_config(overrides={"db_url": "sqlite:///cli.db"})
    assert settings.db_url == "sqlite:///cli.db"


def test_load_config_none_override_ignored(monkeypatch):
    """None-valued overrides (unset CLI options) do not clobber defaults."""
    monkeypatch.delenv("MDCONTENT_OUTPUT_DIR", raising=False)
    settings = load_config(overrides={"output_dir": None})
    assert settings.output_dir == "dist"


def test_load_config_defaults(tmp_path, monkeypatch):
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MDCONTENT_DB_URL", raising=False)
    monkeypatch.delenv("MDCONTENT_STRICT", raising=False)
    settings = load_config()
    assert settings.db_url == "sqlite:///mdcontent.db"
    assert settings.content_dir == "content"
    assert settings.strict is False


def test_load_config_invalid_yaml(tmp_path, monkeypatch):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path, monkeypatch):
    """load_config rejects a config.yaml that is not a mapping."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


@pytest.mark.parametrize("name,raw,expected", [
    ("MDCONTENT_MAX_VERSIONS", "3", 3),
    ("MDCONTENT_WORDS_PER_MINUTE", "120", 120),
    ("MDCONTENT_STRICT", "true", True),
])
def test_load_config_env_coercion(monkeypatch, name, raw, expected):
    """MDCONTENT_<FIELD> env vars are coerced to the field type."""
    monkeypatch.setenv(name, raw)
    settings = load_config()
    field = name.removeprefix("MDCONTENT_").lower()
    assert getattr(settings, field) == expected


def test_load_config_rejects_invalid_value(monkeypatch):
    """Out-of-range values surface as ValueError."""
    monkeypatch.setenv("MDCONTENT_WORDS_PER_MINUTE", "0")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config()
