"""
Configuration Module

Centralized, type-safe configuration management for the Trade API.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Header names, cache key conventions, metric names, limits

Usage:
------
```python
from tradeapi.core.config import get_settings
from tradeapi.core.config.constants import CACHE_KEY_USER

settings = get_settings()
ttl_seconds = settings.cache.expire_after_write_seconds
key = CACHE_KEY_USER.format(id=42)
```

Environment Variables:
---------------------
```bash
CACHE_ENABLED=true
CACHE_MAX_SIZE=1000
CACHE_EXPIRE_AFTER_WRITE_MINUTES=30
DATABASE_URL=sqlite://
LOG_LEVEL=INFO
LOG_FORMAT=json
API_BASE_PATH=/api/v1
```
"""

from .settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
