import logging
import threading
from datetime import date

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .cfbd import UpstreamUnreachable
from .config import Settings
from .context import AppContext, build_context
from .logs import setup_logging
from .preload import run_startup_preload
from .proxy import CacheProxy, ProxyResult
from .resources import GAMES, RANKINGS, TEAMS, Resource

logger = logging.getLogger(__name__)

router = APIRouter()


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx


def get_proxy(ctx: AppContext = Depends(get_context)) -> CacheProxy:
    return CacheProxy(ctx)


def _respond(result: ProxyResult) -> Response:
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.content_type,
        headers={"X-Cache": result.cache.value},
    )


def _serve(proxy: CacheProxy, resource: Resource, year: int | None, team: str | None = None) -> Response:
    year = year or date.today().year
    try:
        result = proxy.get(resource, year, team=team or None)
    except UpstreamUnreachable as e:
        logger.error("%s request failed: %s", resource.kind, e)
        raise HTTPException(status_code=502, detail=f"upstream unreachable: {e.reason}")
    return _respond(result)


@router.get("/api/teams")
def teams(year: int | None = None, proxy: CacheProxy = Depends(get_proxy)):
    return _serve(proxy, TEAMS, year)


@router.get("/api/games")
def games(year: int | None = None, team: str | None = None, proxy: CacheProxy = Depends(get_proxy)):
    # only cached when a team is given
    return _serve(proxy, GAMES, year, team)


@router.get("/api/rankings")
def rankings(year: int | None = None, proxy: CacheProxy = Depends(get_proxy)):
    return _serve(proxy, RANKINGS, year)


@router.get("/health")
def health(ctx: AppContext = Depends(get_context)):
    return {"status": "ok", "cache": "enabled" if ctx.caching_enabled else "disabled"}


def create_app(ctx: AppContext | None = None) -> FastAPI:
    settings = ctx.settings if ctx is not None else Settings.from_env()

    app = FastAPI(title="CFB Data Proxy")
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def startup():
        setup_logging(settings.log_level)
        if app.state.ctx is None:
            app.state.ctx = build_context(settings)

        # No barrier: live requests may race the preloader, last write wins.
        if settings.preload_on_startup and app.state.ctx.caching_enabled:
            threading.Thread(
                target=run_startup_preload,
                args=(app.state.ctx,),
                name="cache-preload",
                daemon=True,
            ).start()

    @app.on_event("shutdown")
    def shutdown():
        if app.state.ctx is not None:
            app.state.ctx.close()

    app.include_router(router)
    return app


def run():
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    logger.info("Listening on :%d", settings.http_port)
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.http_port)


if __name__ == "__main__":
    run()
