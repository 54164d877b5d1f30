from fastapi import FastAPI

from rent_lite.entrypoints.http.exception_handlers import register_exception_handlers
from rent_lite.entrypoints.http.routes.health import router as health_router
from rent_lite.entrypoints.http.routes.listings import router as listings_router


def build_app() -> FastAPI:
    app = FastAPI(
        title="Rent Lite API",
        description="""
        Rental marketplace API serving the raw listing collection.

        ## Features
        - Full listing collection, newest first, for client-side feeds

        Filtering, paging and caching happen in the client's listing feed;
        this API deliberately returns the whole collection in one response.

        ## Error Handling
        All errors return structured JSON responses with error codes.
        See the error response schemas in the API documentation.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        license_info={
            "name": "Proprietary",
        },
    )

    # Register global exception handlers
    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(listings_router, prefix="/v1")

    return app


app = build_app()
