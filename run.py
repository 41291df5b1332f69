import os

import uvicorn

from rentals.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    host = os.environ.get("HOST", settings.HOST)
    port = int(os.environ.get("PORT", settings.PORT))

    # Reload only in development
    reload = settings.RELOAD or os.getenv("ENV") == "development"

    uvicorn.run(
        "rentals.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
        # The PropertyStore lives in process memory; one worker keeps one state
        workers=1,
        lifespan="on",
    )
