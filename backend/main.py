from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import settings
from core.exception_handler import setup_exception_handlers
from core.logging_config import configure_logging
from db.database import create_db_and_tables
from routers.activities import router as activities_router
from routers.babh import router as babh_router
from routers.dashboard import router as dashboard_router
from routers.fields import router as fields_router
from routers.inventory import router as inventory_router
from routers.organizations import router as organizations_router
from routers.seasons import router as seasons_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Agro Ops API",
    description="API for farm operations: fields, activities and the inventory ledger",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


app.include_router(organizations_router, prefix="/organizations", tags=["organizations"])
app.include_router(seasons_router, prefix="/seasons", tags=["seasons"])
app.include_router(fields_router, prefix="/fields", tags=["fields"])

# Warehouse and the activities that draw from it
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(activities_router, prefix="/activities", tags=["activities"])

app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(babh_router, prefix="/babh", tags=["babh"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
