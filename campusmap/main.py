import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campusmap.config import settings
from campusmap.routers.paths import router as paths_router
from campusmap.services.spanner import SpannerQueryService

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title="Campus Map API", version="0.1.0")
app.state.query_service = SpannerQueryService()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(paths_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
