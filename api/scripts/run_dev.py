"""
Script para ejecutar el servidor en modo desarrollo (reload, sin scheduler).
"""
import os
import sys

import uvicorn

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from subregistry.core.config import settings


if __name__ == "__main__":
    os.environ.setdefault("SYNC_SCHEDULER_ENABLED", "false")
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
