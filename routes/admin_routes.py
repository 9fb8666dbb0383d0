from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket
from fastapi.responses import JSONResponse, RedirectResponse
from typing import Optional
from schemas.appointment import StatusUpdate
from schemas.auth import LoginRequest, Session
from schemas.dashboard import DashboardSnapshot
from schemas.service import Service, ServiceUpsert
from config.container import AppContainer, get_container
from crud import appointment_crud
from crud.errors import StoreError, StoreUnreachable
from services import moderation_service
from services.auth_service import InvalidCredentials
from services.moderation_service import AppointmentNotFound, ConfirmationRequired, ModerationError
from services.session_guard import (
    DASHBOARD_PATH,
    LOGIN_PATH,
    SESSION_COOKIE,
    redirect_for,
    require_session,
    set_session_cookie,
)
import asyncio
import logging

logger = logging.getLogger(__name__)

LOGIN_UNREACHABLE_MESSAGE = (
    "The clinical server is unreachable. Check if the database is paused or offline."
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)


@router.get("/login")
async def login_form(request: Request, container: AppContainer = Depends(get_container)):
    session = await container.guard.current_session(request.cookies.get(SESSION_COOKIE))
    target = redirect_for(LOGIN_PATH, session)
    if target:
        return RedirectResponse(target, status_code=303)
    return {"detail": "Sign in with your staff email and password."}


@router.post("/login")
async def login(credentials: LoginRequest, container: AppContainer = Depends(get_container)):
    try:
        session = await container.auth.sign_in_with_password(
            credentials.email, credentials.password.get_secret_value()
        )
    except InvalidCredentials as e:
        return JSONResponse(status_code=401, content={"error": e.message, "type": "auth"})
    except StoreUnreachable as e:
        logger.error(f"Login failed, store unreachable: {e.message}")
        return JSONResponse(status_code=503, content={"error": LOGIN_UNREACHABLE_MESSAGE, "type": "network"})
    except StoreError as e:
        logger.error(f"Login failed: {e.message}")
        return JSONResponse(status_code=502, content={"error": e.message, "type": "unknown"})

    response = RedirectResponse(DASHBOARD_PATH, status_code=303)
    set_session_cookie(response, session, container.settings.session_cookie_secure)
    return response


@router.post("/logout")
async def logout(request: Request, container: AppContainer = Depends(get_container)):
    await container.auth.sign_out(request.cookies.get(SESSION_COOKIE))
    response = RedirectResponse(LOGIN_PATH, status_code=303)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("", response_model=DashboardSnapshot)
async def dashboard(
    q: Optional[str] = None,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    await container.aggregator.refresh()
    return container.aggregator.snapshot(q)


@router.post("/sync", response_model=DashboardSnapshot)
async def sync(
    q: Optional[str] = None,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    await container.aggregator.refresh()
    return container.aggregator.snapshot(q)


@router.post("/appointments/{appointment_id}/status", response_model=DashboardSnapshot)
async def update_status(
    appointment_id: str,
    update: StatusUpdate,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    try:
        await moderation_service.set_status(container.db, container.aggregator, appointment_id, update.status)
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ModerationError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return container.aggregator.snapshot()


@router.delete("/appointments/{appointment_id}", response_model=DashboardSnapshot)
async def delete_appointment(
    appointment_id: str,
    confirm: bool = False,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    try:
        await moderation_service.delete_appointment(
            container.db, container.aggregator, appointment_id, confirmed=confirm
        )
    except ConfirmationRequired as e:
        raise HTTPException(status_code=428, detail=e.message)
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ModerationError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return container.aggregator.snapshot()


@router.post("/appointments/{appointment_id}/summary")
async def summarize_notes(
    appointment_id: str,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    try:
        appointment = await appointment_crud.get_appointment(container.db, appointment_id)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=e.message)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if not appointment.notes:
        raise HTTPException(status_code=422, detail="Appointment has no notes to summarize")

    summary = await container.summarizer.summarize(appointment.notes, appointment.service_type)
    return {"id": appointment.id, "summary": summary}


@router.put("/services", response_model=Service)
async def save_service(
    payload: ServiceUpsert,
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container)
):
    try:
        return await moderation_service.upsert_service(container.db, container.catalog, payload)
    except ModerationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.websocket("/live")
async def live_dashboard(websocket: WebSocket):
    """Push a dashboard snapshot after every refresh while the session lasts.

    Sending the text ``sync`` asks for a refresh.
    """
    container: AppContainer = websocket.app.state.container

    async with container.guard.watch(websocket.cookies.get(SESSION_COOKIE)) as watcher:
        if watcher.session is None:
            await websocket.close(code=4401)
            return

        await websocket.accept()
        async with container.aggregator.subscribe() as updates:
            ended = asyncio.create_task(watcher.ended.wait())
            incoming = asyncio.create_task(websocket.receive())
            update = asyncio.create_task(updates.get())
            try:
                await container.aggregator.refresh()
                while True:
                    done, _ = await asyncio.wait({ended, incoming, update}, return_when=asyncio.FIRST_COMPLETED)

                    if update in done:
                        await websocket.send_json(update.result().model_dump(mode="json"))
                        update = asyncio.create_task(updates.get())

                    if ended in done:
                        await websocket.close(code=4401)
                        break

                    if incoming in done:
                        message = incoming.result()
                        if message["type"] == "websocket.disconnect":
                            break
                        if message.get("text") == "sync":
                            await container.aggregator.refresh()
                        incoming = asyncio.create_task(websocket.receive())
            finally:
                for task in (ended, incoming, update):
                    task.cancel()
