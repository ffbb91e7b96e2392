# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.handlers import app_error_handler
from app.api.routes import router
from app.core.config import CORS_ORIGINS, LOG_LEVEL
from app.core.errors import AppError
from app.mcp.server import mcp_router

logging.basicConfig(level=LOG_LEVEL)


app = FastAPI(title="Krishi Mitra Farming Assistant")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(AppError, app_error_handler)
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")


if __name__ == "__main__":
    print("Krishi Mitra backend booting...")
