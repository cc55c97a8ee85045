"""
rhyzome - main entry point.

Runs the HTTP API with uvicorn:

    rhyzome                       # uses RHYZOME_* env / .env
    uvicorn rhyzome.api.app:create_app --factory --reload
"""

from __future__ import annotations

import logging

import uvicorn

from rhyzome.config import DEFAULT_ADMIN_PASSWORD, get_settings


def main():
    """Main entry point."""
    settings = get_settings()
    
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    
    if settings.is_production and settings.admin_password == DEFAULT_ADMIN_PASSWORD:
        logging.getLogger(__name__).warning(
            "Running in production with the default admin password; set RHYZOME_ADMIN_PASSWORD"
        )
    
    uvicorn.run(
        "rhyzome.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
