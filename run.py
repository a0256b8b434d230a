#!/usr/bin/env python3
"""Run the application."""
import uvicorn

from codeduo.api.dependencies import get_config

if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "codeduo.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=True,
    )
