"""
User Routes
===========

CACHING:
--------
    GET /users                 cached under users:all
    GET /users/paginated       cached under users:page:{p}:size:{s}:sort:{f}:{dir}
    GET /users/{id}            cached under user:{id}

INVALIDATION:
-------------
    POST   /users              evicts users:all
    PUT    /users/{id}         evicts user:{id} and users:all
    DELETE /users/{id}         evicts user:{id} and users:all

Page keys are never evicted on writes; they age out with the cache's
expire-after-write window.

Synchronous handlers (``def``) run on FastAPI's threadpool and call the
service directly. The paginated handler is ``async`` and pushes the two
queries onto the TaskExecutor.
"""

from fastapi import APIRouter, Response, status

from tradeapi.application.api.dependencies import (
    CacheDep,
    ExecutorDep,
    MetricsDep,
    PageRequestDep,
    UserServiceDep,
)
from tradeapi.application.api.models.pagination import PageResponse
from tradeapi.application.api.models.users import User, UserCreate
from tradeapi.application.services.pagination import paginate_async
from tradeapi.core.config.constants import (
    CACHE_KEY_ALL_USERS,
    CACHE_KEY_USER,
    METRIC_HTTP_DURATION,
    METRIC_USERS_CREATED,
    METRIC_USERS_DELETED,
    METRIC_USERS_UPDATED,
    Resource,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[User])
def list_users(service: UserServiceDep, cache: CacheDep):
    """All users."""
    return cache.get_or_compute(CACHE_KEY_ALL_USERS, list, service.list_all)


@router.get("/paginated", response_model=PageResponse[User])
async def list_users_paginated(
    page_request: PageRequestDep,
    service: UserServiceDep,
    cache: CacheDep,
    executor: ExecutorDep,
    metrics: MetricsDep,
):
    """
    One page of users.

    Query parameters: ``page`` (0-based), ``size`` (1-100, default 20),
    ``sortBy``, ``sortDirection`` (ASC/DESC).
    """
    with metrics.time_operation(METRIC_HTTP_DURATION):
        return await paginate_async(cache, Resource.USERS, service, page_request, executor)


@router.get("/{user_id}", response_model=User)
def get_user(user_id: int, service: UserServiceDep, cache: CacheDep):
    """Single user; 404 when absent."""
    return cache.get_or_compute(
        CACHE_KEY_USER.format(id=user_id), User, lambda: service.get_by_id(user_id)
    )


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, service: UserServiceDep, cache: CacheDep, metrics: MetricsDep):
    created = service.create(body)
    cache.evict(CACHE_KEY_ALL_USERS)
    metrics.increment_counter(METRIC_USERS_CREATED)
    return created


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: int,
    body: UserCreate,
    service: UserServiceDep,
    cache: CacheDep,
    metrics: MetricsDep,
):
    updated = service.update(user_id, body)
    cache.evict(CACHE_KEY_USER.format(id=user_id))
    cache.evict(CACHE_KEY_ALL_USERS)
    metrics.increment_counter(METRIC_USERS_UPDATED)
    return updated


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, service: UserServiceDep, cache: CacheDep, metrics: MetricsDep):
    service.delete(user_id)
    cache.evict(CACHE_KEY_USER.format(id=user_id))
    cache.evict(CACHE_KEY_ALL_USERS)
    metrics.increment_counter(METRIC_USERS_DELETED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
