from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from config.container import AppContainer
from config.settings import Settings, setup_logging
from routes import (
    admin_routes,
    booking_routes,
    notification_routes,
    service_routes
)
from services.session_guard import DASHBOARD_PATH, LOGIN_PATH, LoginRequired, is_admin_path
from typing import Optional
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
import logging

logger = logging.getLogger(__name__)


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    """Assemble the API. A prepared container may be passed in (tests do)."""
    app = FastAPI(title="Serenity Clinic Booking")

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(booking_routes.router)
    app.include_router(service_routes.router)
    app.include_router(notification_routes.router)
    app.include_router(admin_routes.router)

    @app.on_event("startup")
    async def startup_container():
        try:
            if container is not None:
                app.state.container = container
            else:
                settings = Settings()
                setup_logging(settings)
                app.state.container = AppContainer(settings)
            await app.state.container.start()
        except Exception as e:
            logger.error(f"Error during startup: {str(e)}")
            raise

    @app.on_event("shutdown")
    async def shutdown_container():
        try:
            await app.state.container.stop()
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}")

    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        return RedirectResponse(LOGIN_PATH, status_code=303)

    @app.get("/{path:path}", include_in_schema=False)
    async def fallback(path: str, request: Request):
        # This route shadows the router's slash redirect, so strip it here first
        if path.endswith("/") and path.strip("/"):
            target = "/" + path.rstrip("/")
            if request.url.query:
                target = f"{target}?{request.url.query}"
            return RedirectResponse(target, status_code=307)

        # Unknown admin pages land on the dashboard (which gates itself), the rest on the form
        if is_admin_path(f"/{path}"):
            return RedirectResponse(DASHBOARD_PATH, status_code=303)
        return RedirectResponse("/", status_code=303)

    return app


app = create_app()

if __name__ == "__main__":
    settings = Settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
