import logging

import uvicorn

from tablebot.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("🚀 Starting Restaurant Assistant Bot...")

    uvicorn.run(
        "tablebot.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
