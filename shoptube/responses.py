from fastapi.responses import JSONResponse


def fail(message: str, status_code: int = 400, **extra) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)
