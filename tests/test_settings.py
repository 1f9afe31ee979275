"""
Tests for `config/settings.py`.
"""

from __future__ import annotations

import os

import pytest

from config.settings import DEFAULT_STORAGE_PATH, Settings, build_store, load_settings
from repositories.storage import JsonFileStorage, MemoryStorage, SupabaseStorage

ENV_VARS = (
    "PIPELINE_STORAGE_BACKEND",
    "PIPELINE_STORAGE_PATH",
    "PIPELINE_SUPABASE_TABLE",
    "PIPELINE_OWNER_NAME",
    "PIPELINE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults(tmp_path) -> None:
    settings = load_settings(env_file=tmp_path / ".env")

    assert settings == Settings()
    assert settings.storage_path == DEFAULT_STORAGE_PATH
    assert isinstance(build_store(settings).surface, MemoryStorage)


def test_env_file_values_are_loaded(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "PIPELINE_STORAGE_BACKEND=File\n"
        f"PIPELINE_STORAGE_PATH={tmp_path / 'store.json'}\n"
        "PIPELINE_OWNER_NAME=Acme Studio\n"
        "PIPELINE_LOG_LEVEL=debug\n",
        encoding="utf-8",
    )

    settings = load_settings(env_file=env_file)

    assert settings.storage_backend == "file"
    assert settings.owner_name == "Acme Studio"
    assert settings.log_level == "DEBUG"
    surface = build_store(settings).surface
    assert isinstance(surface, JsonFileStorage)
    assert surface.path == tmp_path / "store.json"


def test_supabase_backend_uses_configured_table(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PIPELINE_STORAGE_BACKEND", "supabase")
    monkeypatch.setenv("PIPELINE_SUPABASE_TABLE", "crm_store")

    surface = build_store(load_settings(env_file=tmp_path / ".env")).surface

    assert isinstance(surface, SupabaseStorage)
    assert surface.table == "crm_store"


def test_unknown_backend_is_rejected(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PIPELINE_STORAGE_BACKEND", "redis")

    with pytest.raises(ValueError):
        load_settings(env_file=tmp_path / ".env")
