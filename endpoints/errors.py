from fastapi.responses import JSONResponse
from services.ledger import LedgerError

def error_response(message: str, status_code: int = 400) -> JSONResponse:
    # `error` and `message` carry the same text; older clients read either
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, "message": message})

def ledger_error_response(err: LedgerError) -> JSONResponse:
    return error_response(err.message, err.status_code)
