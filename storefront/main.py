"""
Storefront Cart Application

HTTP surface over the session-owned cart, coupon and wishlist state.
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, get_settings
from .core.session import SessionManager
from .database.storage import KeyValueStorage
from .routes import cart_router, session_router, wishlist_router
from .services.wishlist_client import WishlistClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    wishlist_client: Optional[WishlistClient] = None,
    durable_storage_factory: Optional[Callable[[str], KeyValueStorage]] = None,
) -> FastAPI:
    """Build the application; arguments replace the configured collaborators"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"{settings.app_name} starting up...")
        logger.info(f"Wishlist API: {settings.wishlist_api_url}")
        client = wishlist_client or WishlistClient(
            settings.wishlist_api_url,
            timeout=settings.wishlist_timeout,
        )
        app.state.session_manager = SessionManager(
            settings,
            client,
            durable_storage_factory=durable_storage_factory,
        )

        yield

        logger.info(f"{settings.app_name} shutting down...")
        await client.close()

    app = FastAPI(
        title=settings.app_name,
        description="Cart, coupon and wishlist state for the storefront",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session_router)
    app.include_router(cart_router)
    app.include_router(wishlist_router)

    @app.get("/")
    async def home():
        return {
            "message": f"{settings.app_name} API",
            "docs": "/docs",
            "endpoints": {
                "session": "/api/session",
                "cart": "/api/cart",
                "wishlist": "/api/wishlist",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "storefront",
            "sessions": len(app.state.session_manager.sessions)
            if hasattr(app.state, "session_manager")
            else 0,
        }

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
