import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import DB_PATH, LOG_LEVEL
from core.errors import CartError
from core.log import setup_logging
from db import open_db
from routers import cart

logger = logging.getLogger(__name__)


def create_app(db_path: str | None = None, **db_options) -> FastAPI:
    path = db_path or DB_PATH

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        app.state.db = open_db(path, **db_options)
        try:
            yield
        finally:
            app.state.db.close()

    app = FastAPI(title="Cart Store", version="1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True,
                       allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(CartError)
    async def cart_error_handler(request: Request, exc: CartError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(cart.router)
    return app


setup_logging(LOG_LEVEL)
app = create_app()
