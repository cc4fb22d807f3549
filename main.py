# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import uvicorn

from config import get_settings
from database import Base, engine
from exceptions import ExpenseTrackerError, PersistenceError
from router import router

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


setup_logging(get_settings().log_level)
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Split Expense Tracker API")


@app.exception_handler(ExpenseTrackerError)
async def expense_tracker_error_handler(request: Request, exc: ExpenseTrackerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("%s %s storage failure: %s", request.method, request.url.path, exc)
    return await expense_tracker_error_handler(request, PersistenceError())


app.include_router(router, prefix="/api/expenses", tags=["expenses"])


@app.get("/")
def home():
    return {"message": "Welcome to Split Expense Tracker API"}


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
