#!/usr/bin/env python3
"""
Server entry point for the Complexity Broker.
"""
import uvicorn

from complexity_broker.config import settings, logger


def main():
    """Run the server."""
    logger.info("Starting Complexity Broker on %s:%d", settings.HOST, settings.PORT)

    uvicorn.run(
        "complexity_broker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
