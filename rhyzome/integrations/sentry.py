# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. pip install "rhyzome[sentry]"
#   2. Set RHYZOME_SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry() is called from the app lifespan (rhyzome/api/app.py)
#
# =============================================================================

import logging

from rhyzome.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Sentry SDK is optional - error tracking is simply off without it
try:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    SENTRY_AVAILABLE = True
except ImportError:
    SENTRY_AVAILABLE = False
    sentry_sdk = None


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Initialize Sentry error tracking.
    
    Returns True if initialized, False if skipped.
    """
    settings = settings or get_settings()
    
    if not settings.sentry_dsn:
        logger.info("RHYZOME_SENTRY_DSN not set - error tracking disabled")
        return False
    
    if not SENTRY_AVAILABLE:
        logger.warning("Sentry DSN set but sentry-sdk is not installed - error tracking disabled")
        return False
    
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        send_default_pii=False,
        before_send=_filter_events,
    )
    
    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Drop expected client errors and scrub bearer tokens."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        
        from fastapi import HTTPException
        if isinstance(exc_value, HTTPException):
            if exc_value.status_code in (401, 403, 404, 422):
                return None
    
    # Tokens are single-use, but a leaked unused one is still live
    request = event.get("request")
    if request and "headers" in request:
        headers = request["headers"]
        for key in list(headers.keys()):
            if key.lower() in ("authorization", "cookie"):
                headers[key] = "[Filtered]"
    
    data = (request or {}).get("data")
    if isinstance(data, dict) and "password" in data:
        data["password"] = "[Filtered]"
    
    return event


def capture_exception(error: Exception, **context) -> str | None:
    """
    Capture an exception to Sentry.
    
    Returns the event ID if captured, None otherwise.
    """
    if not SENTRY_AVAILABLE or not sentry_sdk.get_client().is_active():
        logger.exception("Error (Sentry disabled)", exc_info=error)
        return None
    
    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)
