"""Run the API server: ``python -m classfolio``."""

from __future__ import annotations

import uvicorn

from classfolio.core.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "classfolio.main:create_app",
        factory=True,
        host=settings.classfolio_app_host,
        port=settings.classfolio_app_port,
        log_level=settings.classfolio_log_level.lower(),
    )


if __name__ == "__main__":
    main()
