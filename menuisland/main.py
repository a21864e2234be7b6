"""
Main FastAPI application
"""
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select

from menuisland.config import get_settings
from menuisland.database import engine, Base, AsyncSessionLocal
from menuisland.models import Template
from menuisland.services.menu_assembler import RestaurantNotFound
from menuisland.services.translation import get_translator
from menuisland.api import public, analytics, restaurants
from menuisland.utils.logger import get_logger

settings = get_settings()
logger = get_logger("menuisland")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")

    # Every tenant falls back to the default template, so it must exist
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Template).where(Template.id == settings.DEFAULT_TEMPLATE_ID)
        )
        if not result.scalar_one_or_none():
            session.add(Template(
                id=settings.DEFAULT_TEMPLATE_ID,
                name="Classico",
                description="Clean single-column menu",
                color_scheme={"primary": "#1f2937", "accent": "#b45309", "background": "#ffffff"},
                is_popular=True,
            ))
            await session.commit()
            logger.info(f"Seeded default template (id={settings.DEFAULT_TEMPLATE_ID})")

    yield

    await get_translator().aclose()
    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS: tenant menus are served from any subdomain of the base domain
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_origin_regex=r"https://([a-z0-9-]+\.)?" + re.escape(settings.BASE_DOMAIN),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RestaurantNotFound)
async def restaurant_not_found_handler(request: Request, exc: RestaurantNotFound):
    return JSONResponse(status_code=404, content={"detail": "Restaurant not found"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": "An unexpected error occurred"},
    )


# Include routers
app.include_router(public.router)
app.include_router(restaurants.router)
app.include_router(analytics.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "menuisland.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
