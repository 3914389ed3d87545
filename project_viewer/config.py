"""Process configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from project_viewer.rewrite import RewriteStrategy

STORAGE_BACKENDS = ("gcs", "s3")
TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    bucket: str
    storage_backend: str = "gcs"
    key_prefix: str = "main"
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    rewrite_strategy: RewriteStrategy = RewriteStrategy.PREFIX
    spa_fallback: bool = False
    root_cache_control: str = "public, max-age=60"
    asset_cache_control: str = "public, max-age=86400"
    storage_timeout: float = 5.0
    cors_allow_origin: str = "*"
    port: int = 3001
    log_level: str = "INFO"


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``env`` (defaults to ``os.environ``)."""

    env = os.environ if env is None else env

    bucket = env.get("PROJECTS_BUCKET_NAME") or env.get("AWS_S3_BUCKET")
    if not bucket:
        raise RuntimeError("PROJECTS_BUCKET_NAME env var is required")

    backend = env.get("STORAGE_BACKEND", "gcs").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )

    strategy_name = env.get("REWRITE_STRATEGY", RewriteStrategy.PREFIX.value)
    try:
        strategy = RewriteStrategy.parse(strategy_name)
    except ValueError as exc:
        raise RuntimeError(f"REWRITE_STRATEGY: {exc}") from None

    return Settings(
        bucket=bucket,
        storage_backend=backend,
        key_prefix=env.get("PROJECTS_KEY_PREFIX", "main").strip("/") or "main",
        aws_region=env.get("AWS_REGION") or "us-east-1",
        aws_access_key_id=env.get("AWS_ACCESS_KEY_ID") or None,
        aws_secret_access_key=env.get("AWS_SECRET_ACCESS_KEY") or None,
        rewrite_strategy=strategy,
        spa_fallback=env.get("SPA_FALLBACK", "").strip().lower() in TRUTHY,
        root_cache_control=env.get("ROOT_CACHE_CONTROL", "public, max-age=60"),
        asset_cache_control=env.get("ASSET_CACHE_CONTROL", "public, max-age=86400"),
        storage_timeout=_number(env, "STORAGE_TIMEOUT_SECONDS", 5.0, float),
        cors_allow_origin=env.get("CORS_ALLOW_ORIGIN", "*"),
        port=_number(env, "PORT", 3001, int),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
