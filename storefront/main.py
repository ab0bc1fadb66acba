# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from storefront.core.auth import SupabaseAuthOracle
from storefront.core.config import get_settings
from storefront.core.providers import storefront_providers
from storefront.core.supabase_client import create_supabase_client
from storefront.database import create_db_and_tables, engine
from storefront.repositories.local_storage_repo import LocalStorageRepository
from storefront.repositories.wishlist_repo import WishlistRepository

# Routers
from storefront.routers.auth import router as auth_router
from storefront.routers.cart import router as cart_router
from storefront.routers.wishlist import router as wishlist_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the local storage table.
      - Connect to Supabase and build the commerce providers
        (query engine -> language -> wishlist -> cart).

    Shutdown:
      - Wait for in-flight wishlist writes, then release the providers.
    """
    logger.info("🔄 Startup: Preparing local storage...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: Local storage OK.")
    except Exception as e:
        logger.error(f"❌ Startup: Local storage FAILED: {e}")
        raise

    client = await create_supabase_client()
    async with storefront_providers(
        storage=LocalStorageRepository(engine),
        auth=SupabaseAuthOracle(client),
        wishlist_repo=WishlistRepository(client, settings.WISHLIST_TABLE),
        settings=settings,
    ) as providers:
        app.state.providers = providers
        yield
    logger.info("👋 Shutdown: Storefront providers released.")


app = FastAPI(
    title=settings.PROJECT_NAME or "Dang Storefront",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(wishlist_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "dang-storefront"}
