"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import lease_end
from src.config import settings
from src.data.memory_store import InMemoryProcessStore

logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title="Lease-End Settlement",
    description="Deposit settlement and recovery planning at the end of a tenancy",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.process_store = InMemoryProcessStore()

app.include_router(lease_end.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
