"""
Run the Trade API with uvicorn.

Usage:
    python -m tradeapi
"""

import uvicorn

from tradeapi.core.config.settings import get_settings


def main() -> None:
    settings = get_settings()

    uvicorn.run(
        "tradeapi.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
