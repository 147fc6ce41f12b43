"""
Application Services

Business logic between the HTTP routes and the repositories.
"""

from tradeapi.application.services.pagination import (
    PageSource,
    build_page,
    paginate,
    paginate_async,
)
from tradeapi.application.services.resource_service import (
    ResourceService,
    TradeService,
    UserService,
)

__all__ = [
    "PageSource",
    "ResourceService",
    "TradeService",
    "UserService",
    "build_page",
    "paginate",
    "paginate_async",
]
