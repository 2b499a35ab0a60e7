"""Error handling helpers for the storefront API."""
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in storefront API: %s", exc, exc_info=True)
        return {
            "success": False,
            "message": "An internal error occurred while processing your request. Please try again later.",
            "metadata": {"error": type(exc).__name__, "context": context or {}},
        }
