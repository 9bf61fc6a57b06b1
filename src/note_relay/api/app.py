import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from note_relay.api.schemas import ErrorResult, NoteResult
from note_relay.service.relay import RelayService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

app = FastAPI(title="note-relay", version="0.1.0")
service = RelayService()


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@app.api_route(
    "/api/parse-note",
    methods=RELAY_METHODS,
    responses={
        200: {"model": NoteResult},
        400: {"model": ErrorResult},
        405: {"model": ErrorResult},
        500: {"model": ErrorResult},
        502: {"model": ErrorResult},
    },
)
async def parse_note(request: Request) -> JSONResponse:
    # Every method is routed here so non-POST requests get the relay's own 405 body.
    body = await request.body()
    result = await service.handle(request.method, body)
    return JSONResponse(status_code=result.status_code, content=result.body)
