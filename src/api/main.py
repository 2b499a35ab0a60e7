"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import services
from src.api.endpoints.catalog import catalog_api
from src.api.endpoints.chat import chat_api
from src.api.endpoints.checkout import checkout_api
from src.api.endpoints.newsletter import newsletter_api
from src.api.endpoints.reviews import reviews_api
from src.api.endpoints.wishlist import wishlist_api
from src.chatbot.dependencies import api_key_protection
from src.chatbot.session import ReplyPendingError, SessionClosedError
from src.chatbot.state_manager import UnknownSessionError
from src.chatbot.validation import FormValidationError
from src.error_handler import ErrorHandler
from src.storefront.cart import CartError
from src.storefront.wishlist import WishlistError

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "KOLZO Storefront API"

# Initialize FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="Product catalogue, newsletter capture, chat concierge and mock checkout for the KOLZO storefront",
    version="1.0.0",
    dependencies=[Depends(api_key_protection)],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=services.config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handler = ErrorHandler()


# ============================================================================
# ERROR HANDLERS
# ============================================================================
@app.exception_handler(FormValidationError)
async def form_validation_error_handler(request: Request, exc: FormValidationError):
    return JSONResponse(status_code=422, content={"success": False, "message": exc.message, "field_errors": exc.field_errors})


@app.exception_handler(UnknownSessionError)
async def unknown_session_handler(request: Request, exc: UnknownSessionError):
    return JSONResponse(status_code=404, content={"success": False, "message": str(exc)})


@app.exception_handler(ReplyPendingError)
async def reply_pending_handler(request: Request, exc: ReplyPendingError):
    return JSONResponse(status_code=409, content={"success": False, "message": str(exc)})


@app.exception_handler(SessionClosedError)
async def session_closed_handler(request: Request, exc: SessionClosedError):
    return JSONResponse(status_code=409, content={"success": False, "message": str(exc)})


@app.exception_handler(CartError)
async def cart_error_handler(request: Request, exc: CartError):
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(WishlistError)
async def wishlist_error_handler(request: Request, exc: WishlistError):
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    payload = error_handler.handle_exception(exc, context={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content=payload)


# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {"service": SERVICE_NAME, "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check (session cache)."""
    return {"status": "healthy", "cache": {"redis": services.redis_cache.ping()}, "timestamp": datetime.now().isoformat()}


api_router = APIRouter()
api_router.include_router(catalog_api)
api_router.include_router(newsletter_api)
api_router.include_router(chat_api)
api_router.include_router(checkout_api)
api_router.include_router(reviews_api)
api_router.include_router(wishlist_api)

app.include_router(api_router, prefix="/api")


# ============================================================================
# STARTUP/SHUTDOWN EVENTS
# ============================================================================
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("Starting %s...", SERVICE_NAME)
    logger.info("Catalogue: %d products", len(services.catalogue_client.list_products()))
    logger.info("Newsletter client: %s", type(services.newsletter_client).__name__)

    if services.redis_cache.ping():
        logger.info("Session cache connection successful")
    else:
        logger.warning("Session cache connection failed")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", SERVICE_NAME)
    await services.state_manager.close_all()
