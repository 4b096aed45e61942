from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.exceptions import LedgerError
from core.logging_config import get_logger

logger = get_logger("errors")


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(LedgerError)
    async def ledger_exception_handler(request: Request, exc: LedgerError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)
