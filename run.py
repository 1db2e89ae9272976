#!/usr/bin/env python3
"""Run the application."""
import uvicorn

from coachflow.api.container import get_container

if __name__ == "__main__":
    config = get_container().config
    uvicorn.run(
        "coachflow.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=True,
    )
