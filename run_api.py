#!/usr/bin/env python3
"""
Script to run the GPU Sizer API server.
"""

import logging

import uvicorn

from gpu_sizer.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "gpu_sizer.apis.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
