import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from healthvision.agent import SERVICE_NAME, SERVICE_VERSION, HealthAssistant
from healthvision.config import Settings
from healthvision.errors import InputValidationError
from healthvision.gateway import ModelGateway
from healthvision.history import InMemorySessionStore
from healthvision.locales import SUPPORTED_LANGUAGES
from healthvision.schemas import (
    AnalysisRequest,
    AnalyzeResponse,
    DrugCheckRequest,
    DrugCheckResponse,
    HealthInfoRequest,
    HealthInfoResponse,
    HistoryResponse,
    ImageAnalysisResponse,
    VoiceProbeResponse,
    VoiceRequest,
    VoiceResponse,
)

settings = Settings.from_env()

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

assistant = HealthAssistant(
    gateway=ModelGateway(
        api_key=settings.api_key,
        model=settings.model_name,
        vision_model=settings.vision_model_name,
        base_url=settings.base_url,
        timeout=settings.gateway_timeout,
    ),
    store=InMemorySessionStore(
        max_sessions=settings.history_max_sessions,
        max_entries=settings.history_max_entries,
    ),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("{} v{} starting", SERVICE_NAME, SERVICE_VERSION)
    logger.info("Primary model: {}, vision model: {}", settings.model_name, settings.vision_model_name)
    logger.info("API key: {}", "configured" if settings.has_credential else "missing (static fallback only)")
    logger.info("Supported languages: {}", ", ".join(SUPPORTED_LANGUAGES))
    yield


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],  # relax for demo
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InputValidationError)
async def input_validation_error(request: Request, exc: InputValidationError):
    logger.info("Rejected {} {}: {}", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid request: {field} {first.get('msg', '')}".strip() if field else "Invalid request body"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.get("/api/health")
async def health():
    return assistant.health()


@app.post("/api/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze(req: AnalysisRequest):
    return await assistant.analyze(req)


@app.post("/api/voice", response_model=VoiceResponse)
async def voice(req: VoiceRequest):
    return await assistant.optimize_voice(req)


@app.post("/api/analyze-image", response_model=ImageAnalysisResponse, response_model_exclude_none=True)
async def analyze_image(
    image: Optional[UploadFile] = File(None),
    symptoms: Optional[str] = Form(None),
    language: Optional[str] = Form("en"),
):
    data = await image.read() if image is not None else None
    content_type = image.content_type if image is not None else None
    return await assistant.analyze_image(data, content_type, symptoms, language)


@app.post("/api/drugs", response_model=DrugCheckResponse, response_model_exclude_none=True)
async def drugs(req: DrugCheckRequest):
    return await assistant.check_drugs(req)


@app.post("/api/health-info", response_model=HealthInfoResponse, response_model_exclude_none=True)
async def health_info(req: HealthInfoRequest):
    return await assistant.health_info(req)


@app.get("/api/history/{session_id}", response_model=HistoryResponse)
async def history(session_id: str):
    return assistant.history(session_id)


@app.get("/api/test-voice", response_model=VoiceProbeResponse)
async def test_voice(language: str = "en"):
    return assistant.voice_probe(language)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=3000)
