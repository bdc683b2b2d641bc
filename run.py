"""Start the simulator API under uvicorn."""

import uvicorn

from mwisim.api.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "mwisim.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
