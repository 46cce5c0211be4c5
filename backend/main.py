# backend/main.py
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db

from routes.auth import router as auth_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router
from routes.products import router as products_router
from routes.stock import router as stock_router
from routes.orders import router as orders_router
from routes.serials import router as serials_router
from routes.imports import router as imports_router
from routes.reports import router as reports_router
from routes.settings import router as settings_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables and register the order item snapshot listeners
init_db()

app = FastAPI(title="InventoryPro API", version="1.0.0")

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(logs_router)
app.include_router(products_router)
app.include_router(stock_router)
app.include_router(orders_router)
app.include_router(serials_router)
app.include_router(imports_router)
app.include_router(reports_router)
app.include_router(settings_router)

logger.info("InventoryPro API ready (origins: %s)", ", ".join(origins))


@app.get("/")
def read_root():
    return {"message": "InventoryPro API is running"}
