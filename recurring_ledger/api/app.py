"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recurring_ledger.api.routes import mortgages, recurring
from recurring_ledger.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Recurring Ledger",
    description="Mortgage amortization plans and recurring-bill forecasts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mortgages.router)
app.include_router(recurring.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
