"""
Trade Routes
============

CACHING:
--------
    GET /trades                 cached under trades:all
    GET /trades/paginated       cached under trades:page:{p}:size:{s}:sort:{f}:{dir}
    GET /trades/{id}            cached under trade:{id}

INVALIDATION:
-------------
    POST   /trades              evicts trades:all
    PUT    /trades/{id}         evicts trade:{id} and trades:all
    DELETE /trades/{id}         evicts trade:{id} and trades:all

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
    TradeServiceDep,
)
from tradeapi.application.api.models.pagination import PageResponse
from tradeapi.application.api.models.trades import Trade, TradeCreate
from tradeapi.application.services.pagination import paginate_async
from tradeapi.core.config.constants import (
    CACHE_KEY_ALL_TRADES,
    CACHE_KEY_TRADE,
    METRIC_HTTP_DURATION,
    METRIC_TRADES_CREATED,
    METRIC_TRADES_DELETED,
    METRIC_TRADES_UPDATED,
    Resource,
)

router = APIRouter(prefix="/trades", tags=["Trades"])


@router.get("", response_model=list[Trade])
def list_trades(service: TradeServiceDep, cache: CacheDep):
    """All trades."""
    return cache.get_or_compute(CACHE_KEY_ALL_TRADES, list, service.list_all)


@router.get("/paginated", response_model=PageResponse[Trade])
async def list_trades_paginated(
    page_request: PageRequestDep,
    service: TradeServiceDep,
    cache: CacheDep,
    executor: ExecutorDep,
    metrics: MetricsDep,
):
    """
    One page of trades.

    Query parameters: ``page`` (0-based), ``size`` (1-100, default 20),
    ``sortBy``, ``sortDirection`` (ASC/DESC).
    """
    with metrics.time_operation(METRIC_HTTP_DURATION):
        return await paginate_async(cache, Resource.TRADES, service, page_request, executor)


@router.get("/{trade_id}", response_model=Trade)
def get_trade(trade_id: int, service: TradeServiceDep, cache: CacheDep):
    """Single trade; 404 when absent."""
    return cache.get_or_compute(
        CACHE_KEY_TRADE.format(id=trade_id), Trade, lambda: service.get_by_id(trade_id)
    )


@router.post("", response_model=Trade, status_code=status.HTTP_201_CREATED)
def create_trade(
    body: TradeCreate, service: TradeServiceDep, cache: CacheDep, metrics: MetricsDep
):
    created = service.create(body)
    cache.evict(CACHE_KEY_ALL_TRADES)
    metrics.increment_counter(METRIC_TRADES_CREATED)
    return created


@router.put("/{trade_id}", response_model=Trade)
def update_trade(
    trade_id: int,
    body: TradeCreate,
    service: TradeServiceDep,
    cache: CacheDep,
    metrics: MetricsDep,
):
    updated = service.update(trade_id, body)
    cache.evict(CACHE_KEY_TRADE.format(id=trade_id))
    cache.evict(CACHE_KEY_ALL_TRADES)
    metrics.increment_counter(METRIC_TRADES_UPDATED)
    return updated


@router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trade(
    trade_id: int, service: TradeServiceDep, cache: CacheDep, metrics: MetricsDep
):
    service.delete(trade_id)
    cache.evict(CACHE_KEY_TRADE.format(id=trade_id))
    cache.evict(CACHE_KEY_ALL_TRADES)
    metrics.increment_counter(METRIC_TRADES_DELETED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
