from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
import os
import logging
from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).parent / ".env", override=False)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Sebenza Back-Office API")

# --- Register routers ---
from sebenza.routers.auth import router as auth_router
from sebenza.routers.time_entries import router as time_entries_router
from sebenza.routers.timesheets import router as timesheets_router
from sebenza.routers.invoices import router as invoices_router
from sebenza.routers.expenses import router as expenses_router
from sebenza.routers.reconciliation import router as reconciliation_router

app.include_router(auth_router)
app.include_router(time_entries_router)
app.include_router(timesheets_router)
app.include_router(invoices_router)
app.include_router(expenses_router)
app.include_router(reconciliation_router)


CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in CORS_ORIGINS],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"ok": True}
