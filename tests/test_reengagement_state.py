"""Testes do lock de execução e do cache de conclusão (Redis)."""

from core.config import settings
from core.reengagement import (
    completion_cache_key,
    current_run_token,
    invalidate_completion_cache,
    release_run_lock,
    try_acquire_run_lock,
)


def test_run_lock_allows_single_holder(mock_redis_client):
    assert try_acquire_run_lock(1, "a") is True
    assert try_acquire_run_lock(1, "b") is False
    assert try_acquire_run_lock(2, "b") is True
    assert current_run_token(1) == "a"


def test_run_lock_release_checks_owner(mock_redis_client):
    try_acquire_run_lock(1, "a")

    assert release_run_lock(1, "b") is False
    assert current_run_token(1) == "a"
    assert release_run_lock(1, "a") is True
    assert try_acquire_run_lock(1, "b") is True


def test_run_lock_expires(mock_redis_client):
    try_acquire_run_lock(1, "a", ttl_seconds=30)
    assert 0 < mock_redis_client.ttl("reeng:run_lock:1") <= 30


def test_invalidate_completion_cache(mock_redis_client):
    mock_redis_client.set(completion_cache_key(7, 10), "{}")
    mock_redis_client.set(completion_cache_key(7, 11), "{}")

    invalidate_completion_cache(7, 10)

    assert mock_redis_client.get("completion:7_10") is None
    assert mock_redis_client.get("completion:7_11") == "{}"


def test_stale_holder_cannot_release_newer_lock(mock_redis_client):
    try_acquire_run_lock(1, "a", ttl_seconds=30)
    # TTL vencido: outra execução assume o lock
    mock_redis_client.delete("reeng:run_lock:1")
    assert try_acquire_run_lock(1, "b") is True

    assert release_run_lock(1, "a") is False
    assert current_run_token(1) == "b"


def test_run_lock_outlives_task_time_limit():
    from workers.celery_app import celery_app

    assert settings.REENGAGEMENT_RUN_LOCK_SECONDS > celery_app.conf.task_time_limit
