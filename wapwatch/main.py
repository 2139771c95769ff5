from fastapi import FastAPI

from wapwatch import __version__
from wapwatch.core.config import settings
from wapwatch.db.session import async_engine, init_db

from wapwatch.api.routers.health import router as health_router
from wapwatch.api.routers.wap import router as wap_router

app = FastAPI(
    title=settings.APP_NAME,
    version=__version__
)


@app.on_event("startup")
async def on_startup():
    await init_db(async_engine)

# Подключаем роутеры (только чтение; пишет в БД конвейер)
app.include_router(health_router, tags=["health"])
app.include_router(wap_router)
