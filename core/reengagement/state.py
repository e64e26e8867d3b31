"""Estado em Redis: lock de execução e cache de conclusão."""

from __future__ import annotations

import uuid
from typing import Optional

from core.config import settings
from core.redis_client import redis_client


# Remove o lock apenas se o token ainda for o desta execução
RELEASE_RUN_LOCK_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def _run_lock_key(activity_id: int) -> str:
    return f"reeng:run_lock:{activity_id}"


def completion_cache_key(user_id: int, course_id: int) -> str:
    return f"completion:{user_id}_{course_id}"


def generate_run_token() -> str:
    return uuid.uuid4().hex


def try_acquire_run_lock(
    activity_id: int, token: str, *, ttl_seconds: Optional[int] = None
) -> bool:
    """Garante no máximo uma execução em andamento por atividade."""

    ttl = ttl_seconds or settings.REENGAGEMENT_RUN_LOCK_SECONDS
    return bool(redis_client.set(_run_lock_key(activity_id), token, nx=True, ex=ttl))


def release_run_lock(activity_id: int, token: str) -> bool:
    """Libera o lock somente se ainda pertencer a esta execução."""

    release = redis_client.register_script(RELEASE_RUN_LOCK_LUA)
    return bool(release(keys=[_run_lock_key(activity_id)], args=[token]))


def current_run_token(activity_id: int) -> Optional[str]:
    return redis_client.get(_run_lock_key(activity_id))


def invalidate_completion_cache(user_id: int, course_id: int) -> None:
    redis_client.delete(completion_cache_key(user_id, course_id))
