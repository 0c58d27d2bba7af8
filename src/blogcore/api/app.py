"""FastAPI application entry point"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from blogcore.api.assets import AssetStore, InMemoryAssetStore
from blogcore.api.routes import router
from blogcore.config import Settings, load_config
from blogcore.core.errors import BlockValidationError, ContentError
from blogcore.crud.database import init_db, make_engine


logger = logging.getLogger(__name__)


async def _block_error(request: Request, exc: BlockValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": str(exc), "index": exc.index, "rule": exc.rule},
    )


async def _content_error(request: Request, exc: ContentError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    assets: Optional[AssetStore] = None,
    ) -> FastAPI:
    """Build the app; anything not passed in is derived from the loaded config."""
    settings = settings or load_config()
    if engine is None:
        engine = make_engine(settings.db_url)
    init_db(engine)

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.assets = assets or InMemoryAssetStore(base_url=settings.asset_base_url)
    app.add_exception_handler(BlockValidationError, _block_error)
    app.add_exception_handler(ContentError, _content_error)
    app.include_router(router, prefix=settings.api_prefix)
    return app
