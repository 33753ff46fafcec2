#!/usr/bin/env python3
"""Start the API with uvicorn on the configured PORT."""
import uvicorn
from ads_panel.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "ads_panel.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
