from fastapi import FastAPI

from finance_importer.api.routes.health import router as health_router
from finance_importer.api.routes.import_exante import router as import_exante_router


app = FastAPI(title="Finance Importer API", version="0.1.0")

app.include_router(health_router)
app.include_router(import_exante_router)
