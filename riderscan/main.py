import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riderscan.config import settings
from riderscan.routers import analyze
from riderscan.services.ocr import OCRService

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One OCR service per process, handed to requests via app.state
    app.state.ocr = OCRService()
    logger.info("OCR service ready", extra={"languages": app.state.ocr.languages})
    yield


app = FastAPI(
    title="RiderScan API",
    description="Earnings extraction for delivery rider screenshots",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {
        "message": "RiderScan API",
        "version": "0.1.0",
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

app.include_router(analyze.router)
