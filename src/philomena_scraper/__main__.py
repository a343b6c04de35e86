"""Run the scrape service with uvicorn: ``python -m philomena_scraper``."""

from __future__ import annotations

import uvicorn

from philomena_scraper.config.settings import get_settings


def main() -> None:
    """Serve the application on ``LISTEN_HOST``:``LISTEN_PORT``."""
    settings = get_settings()
    uvicorn.run(
        "philomena_scraper.api.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
