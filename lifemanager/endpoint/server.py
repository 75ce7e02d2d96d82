"""
HTTP surface of the remote endpoint.

Both GET and POST on ``/`` reach the dispatcher:
- the action comes from the ``action`` query parameter
- a JSON body ``{"action", "payload"}`` overrides it

The body is read raw and parsed whatever its content type, because
clients post it as text/plain.

Run with:
    uvicorn lifemanager.endpoint.server:app
"""

import json
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from lifemanager.config import get_settings
from lifemanager.endpoint.dispatcher import ActionDispatcher
from lifemanager.services.storage.google_sheets import GoogleSheetsRecordStore


logger = structlog.get_logger(__name__)


def create_app(dispatcher: Optional[ActionDispatcher] = None) -> FastAPI:
    """
    Build the endpoint app.

    Without an explicit dispatcher, one backed by Google Sheets is
    created on the first request, so importing needs no credentials.
    """
    app = FastAPI(title="Life Manager Endpoint")
    app.state.dispatcher = dispatcher

    def get_dispatcher() -> ActionDispatcher:
        if app.state.dispatcher is None:
            app.state.dispatcher = ActionDispatcher(GoogleSheetsRecordStore())
        return app.state.dispatcher

    def dispatch(action: Optional[str], payload) -> dict:
        try:
            current = get_dispatcher()
        except Exception as e:
            logger.error("endpoint_not_configured", error=str(e))
            return {"success": False, "message": f"Endpoint not configured: {e}"}
        return current.handle(action, payload)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/")
    def handle_get(action: Optional[str] = None) -> dict:
        return dispatch(action, None)

    @app.post("/")
    async def handle_post(request: Request, action: Optional[str] = None) -> dict:
        payload = None
        raw = await request.body()
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                return {"success": False, "message": "Request body is not valid JSON"}
            if isinstance(body, dict):
                action = body.get("action", action)
                payload = body.get("payload")
        return await run_in_threadpool(dispatch, action, payload)

    return app


app = create_app()


def main() -> None:
    settings = get_settings().endpoint
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
