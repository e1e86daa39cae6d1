"""Dependency helpers for web routes."""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import Request

from domo.config import DomoConfig
from domo.storage.database import Database
from domo.storage.repository import Repository


def get_config(request: Request) -> DomoConfig:
    return request.app.state.config


@contextmanager
def get_db(config: DomoConfig):
    """Open a database connection for one request, ensuring it's closed."""
    with Database(config.db_path) as db:
        yield db


def get_repo(db: Database) -> Repository:
    """Create a repository for database operations."""
    return Repository(db)


def client_ip(request: Request) -> str:
    """Best guess at the caller's IP behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else ""
