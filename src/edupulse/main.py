# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point for the EduPulse API.

Usage:
    uvicorn edupulse.main:app
    edupulse  # console script, reads API_* settings
"""

import uvicorn

from edupulse.api import create_app
from edupulse.core.config import get_settings

app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the API_* settings."""
    settings = get_settings()
    uvicorn.run(
        "edupulse.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=None if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
