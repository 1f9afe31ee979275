"""
Runtime settings.

Values come from the environment, with a `.env` file in the project root
loaded first (python-dotenv). Nothing here is required for the default
in-memory backend; Supabase credentials are only read when the supabase
backend is selected.

Environment variables:
- PIPELINE_STORAGE_BACKEND: memory (default) | file | supabase
- PIPELINE_STORAGE_PATH: JSON file used by the file backend
- PIPELINE_SUPABASE_TABLE: table used by the supabase backend
- PIPELINE_OWNER_NAME: brand/owner stamped on every lead
- PIPELINE_LOG_LEVEL: logging level for the API (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from domain.session import DEFAULT_OWNER_NAME
from repositories.bounded_store import BoundedLocalStore
from repositories.storage import JsonFileStorage, MemoryStorage, StorageSurface, SupabaseStorage

PROJECT_ROOT = Path(__file__).parent.parent

STORAGE_BACKENDS = ("memory", "file", "supabase")
DEFAULT_STORAGE_PATH = PROJECT_ROOT / "data" / "pipeline_store.json"


@dataclass(frozen=True, slots=True)
class Settings:
    storage_backend: str = "memory"
    storage_path: Path = DEFAULT_STORAGE_PATH
    supabase_table: str = "pipeline_store"
    owner_name: str = DEFAULT_OWNER_NAME
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"PIPELINE_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}; "
                f"got {self.storage_backend!r}"
            )


def load_settings(env_file: Path | None = None) -> Settings:
    """Read settings from the environment (after loading the .env file)."""

    load_dotenv(dotenv_path=env_file or PROJECT_ROOT / ".env")

    storage_path = os.getenv("PIPELINE_STORAGE_PATH")
    return Settings(
        storage_backend=(os.getenv("PIPELINE_STORAGE_BACKEND") or "memory").strip().lower(),
        storage_path=Path(storage_path) if storage_path else DEFAULT_STORAGE_PATH,
        supabase_table=os.getenv("PIPELINE_SUPABASE_TABLE") or "pipeline_store",
        owner_name=(os.getenv("PIPELINE_OWNER_NAME") or "").strip() or DEFAULT_OWNER_NAME,
        log_level=(os.getenv("PIPELINE_LOG_LEVEL") or "INFO").strip().upper(),
    )


def build_surface(settings: Settings) -> StorageSurface:
    if settings.storage_backend == "file":
        return JsonFileStorage(settings.storage_path)
    if settings.storage_backend == "supabase":
        return SupabaseStorage(table=settings.supabase_table)
    return MemoryStorage()


def build_store(settings: Settings) -> BoundedLocalStore:
    return BoundedLocalStore(build_surface(settings))


__all__ = ["Settings", "build_store", "build_surface", "load_settings"]
