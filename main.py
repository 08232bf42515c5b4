from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from routers import api_router
from config import settings
from database import engine, Base
from endpoints.errors import error_response
import models  # ensure model registration
import os
import logging
from sqlalchemy import inspect

app = FastAPI(title=settings.PROJECT_NAME, version=settings.API_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# The production schema is owned by the hosted database; only create tables in
# explicit test/dev scenarios (SQLite or env flag).
if os.environ.get("TESTING") or engine.url.get_backend_name() == "sqlite" or os.environ.get("DEV_AUTO_CREATE") == "1":
    Base.metadata.create_all(bind=engine)
else:
    # Lightweight runtime check: warn if tables the ledger relies on are missing
    try:
        existing = set(inspect(engine).get_table_names())
        missing = set(Base.metadata.tables) - existing
        if missing:
            logging.getLogger(__name__).warning(
                "Database schema missing tables %s. Create them or start with DEV_AUTO_CREATE=1.",
                ", ".join(sorted(missing))
            )
    except Exception as e:
        logging.getLogger(__name__).warning("Schema inspection failed: %s", e)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies/params share the 400 envelope used by the ledger
    first = exc.errors()[0] if exc.errors() else {}
    return error_response(f"Invalid request: {first.get('msg', 'validation failed')}", 400)


# Include API routers
app.include_router(api_router, prefix=settings.API_PREFIX)

@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}!"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
