import uuid
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from healthvision.errors import GatewayError, InputValidationError
from healthvision.gateway import ImagePayload, ModelGateway
from healthvision.history import SessionStore, new_session_id
from healthvision.locales import SUPPORTED_LANGUAGES, get_bundle
from healthvision.normalizer import (
    fallback_analysis,
    fallback_drug_check,
    fallback_health_info,
    parse_analysis,
    parse_drug_check,
    parse_health_info,
    parse_speech,
)
from healthvision.prompts import PromptKind, build_prompt
from healthvision.schemas import (
    AnalysisRequest,
    AnalysisResult,
    AnalyzeResponse,
    DrugCheckRequest,
    DrugCheckResponse,
    HealthInfoRequest,
    HealthInfoResponse,
    HistoryResponse,
    ImageAnalysisResponse,
    SessionHistoryEntry,
    VoiceProbeResponse,
    VoiceRequest,
    VoiceResponse,
)

SERVICE_NAME = "HealthVision AI Assistant"
SERVICE_VERSION = "3.0.0"
FALLBACK_MODEL = "Fallback"
MIN_TEXT_LENGTH = 3
HISTORY_PAGE_SIZE = 10
HISTORY_CONTEXT_SIZE = 3
SPEECH_INSTRUCTIONS = "Use browser SpeechSynthesis API"
NO_DESCRIPTION = "No description provided"


def _preview(text: str, limit: int = 50) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


class HealthAssistant:
    """Orchestrates prompt building, the model call, normalization and history."""

    def __init__(self, gateway: ModelGateway, store: SessionStore):
        self.gateway = gateway
        self.store = store

    # ---- symptom analysis ----

    def _history_context(self, session_id: str) -> Optional[str]:
        entries = self.store.recent(session_id, HISTORY_CONTEXT_SIZE)
        if not entries:
            return None
        return "; ".join(
            f'{e.timestamp[:10]} "{_preview(e.symptoms, 80)}" ({e.analysis.severity})' for e in entries
        )

    def _remember(self, session_id: str, req: AnalysisRequest, symptoms: str, analysis: AnalysisResult):
        self.store.append(
            session_id,
            SessionHistoryEntry(
                id=str(uuid.uuid4()),
                timestamp=datetime.now(timezone.utc).isoformat(),
                symptoms=symptoms,
                age=req.age,
                gender=req.gender,
                duration=req.duration,
                language=req.language,
                analysis=analysis,
            ),
        )

    async def analyze(self, req: AnalysisRequest) -> AnalyzeResponse:
        symptoms = (req.symptoms or "").strip()
        if len(symptoms) < MIN_TEXT_LENGTH:
            raise InputValidationError(
                f"Please describe your symptoms (minimum {MIN_TEXT_LENGTH} characters)"
            )

        lang = req.language
        bundle = get_bundle(lang)
        session_id = req.session_id or req.user_id or new_session_id()
        logger.info('Analyzing in {}: "{}"', lang, _preview(symptoms))

        model = FALLBACK_MODEL
        if not self.gateway.configured:
            logger.warning("No API key - using fallback response")
            analysis = fallback_analysis(symptoms, lang)
            note = bundle.no_key_note
        else:
            try:
                prompt = build_prompt(
                    PromptKind.SYMPTOM_ANALYSIS,
                    {
                        "symptoms": symptoms,
                        "age": req.age,
                        "gender": req.gender,
                        "duration": req.duration,
                        "history": self._history_context(session_id),
                    },
                    lang,
                )
                raw = await self.gateway.complete(prompt, max_tokens=1200, temperature=0.1)
                analysis = parse_analysis(raw, symptoms, lang)
                model = self.gateway.model
                note = f"Analysis by {model} ({lang})"
            except GatewayError as e:
                logger.warning("Model gateway error: {}", e)
                analysis = fallback_analysis(symptoms, lang)
                note = bundle.gateway_error_note
            except Exception:
                logger.exception("Analysis error")
                analysis = fallback_analysis(symptoms, lang)
                note = bundle.gateway_error_note

        self._remember(session_id, req, symptoms, analysis)
        return AnalyzeResponse(
            session_id=session_id,
            analysis=analysis,
            model=model,
            language=lang,
            note=note,
        )

    # ---- image analysis ----

    async def analyze_image(
        self,
        data: Optional[bytes],
        content_type: Optional[str],
        symptoms: Optional[str],
        language: Optional[str],
    ) -> ImageAnalysisResponse:
        lang = (language or "").strip() or "en"
        if not data:
            raise InputValidationError("No image uploaded")
        if not (content_type or "").startswith("image/"):
            raise InputValidationError(f"Unsupported file type: {content_type or 'unknown'}")

        bundle = get_bundle(lang)
        description = (symptoms or "").strip() or None

        if not self.gateway.configured:
            return ImageAnalysisResponse(
                analysis=fallback_analysis(description, lang),
                model=FALLBACK_MODEL,
                language=lang,
                note=bundle.no_key_note,
                fallback=True,
            )

        try:
            prompt = build_prompt(PromptKind.IMAGE_ANALYSIS, {"symptoms": description}, lang)
            raw = await self.gateway.complete(
                prompt, ImagePayload(data=data, mime_type=content_type), max_tokens=800
            )
            return ImageAnalysisResponse(
                analysis=parse_analysis(raw, description, lang),
                model=self.gateway.vision_model,
                language=lang,
            )
        except GatewayError as e:
            logger.warning("Vision error: {}", e)
        except Exception:
            logger.exception("Image analysis error")

        # Vision failed: retry on the description alone.
        try:
            prompt = build_prompt(
                PromptKind.SYMPTOM_ANALYSIS, {"symptoms": description or NO_DESCRIPTION}, lang
            )
            raw = await self.gateway.complete(prompt)
            return ImageAnalysisResponse(
                analysis=parse_analysis(raw, description, lang),
                model=self.gateway.model,
                language=lang,
                note=bundle.vision_unavailable_note,
            )
        except GatewayError as e:
            logger.warning("Text analysis after vision failure also failed: {}", e)
        except Exception:
            logger.exception("Image analysis error")

        return ImageAnalysisResponse(
            analysis=fallback_analysis(description, lang),
            model=FALLBACK_MODEL,
            language=lang,
            note=bundle.image_unavailable_note,
            fallback=True,
        )

    # ---- drug interactions ----

    async def check_drugs(self, req: DrugCheckRequest) -> DrugCheckResponse:
        medicines: List[str] = [m.strip() for m in (req.medicines or []) if m and m.strip()]
        if not medicines:
            raise InputValidationError("Medicines array required with at least one medicine")

        lang = req.language
        if not self.gateway.configured:
            return DrugCheckResponse(
                analysis=fallback_drug_check(lang), model=FALLBACK_MODEL, language=lang
            )

        try:
            prompt = build_prompt(
                PromptKind.DRUG_INTERACTION,
                {"medicines": medicines, "conditions": req.conditions, "allergies": req.allergies},
                lang,
            )
            raw = await self.gateway.complete(prompt, max_tokens=1000, temperature=0.1)
            return DrugCheckResponse(
                analysis=parse_drug_check(raw, lang), model=self.gateway.model, language=lang
            )
        except GatewayError as e:
            logger.warning("Drug interaction gateway error: {}", e)
        except Exception:
            logger.exception("Drug interaction error")
        return DrugCheckResponse(
            analysis=fallback_drug_check(lang, unavailable=True),
            model=FALLBACK_MODEL,
            language=lang,
            fallback=True,
        )

    # ---- health information ----

    async def health_info(self, req: HealthInfoRequest) -> HealthInfoResponse:
        topic = (req.topic or "").strip()
        if len(topic) < MIN_TEXT_LENGTH:
            raise InputValidationError(f"Please provide a health topic (minimum {MIN_TEXT_LENGTH} characters)")

        lang = req.language
        if not self.gateway.configured:
            return HealthInfoResponse(
                info=fallback_health_info(lang), model=FALLBACK_MODEL, language=lang
            )

        try:
            prompt = build_prompt(PromptKind.HEALTH_INFO, {"topic": topic}, lang)
            raw = await self.gateway.complete(prompt, max_tokens=800, temperature=0.2)
            return HealthInfoResponse(
                info=parse_health_info(raw, lang), model=self.gateway.model, language=lang
            )
        except GatewayError as e:
            logger.warning("Health info gateway error: {}", e)
        except Exception:
            logger.exception("Health info error")
        return HealthInfoResponse(
            info=fallback_health_info(lang, unavailable=True),
            model=FALLBACK_MODEL,
            language=lang,
            fallback=True,
        )

    # ---- voice ----

    async def optimize_voice(self, req: VoiceRequest) -> VoiceResponse:
        text = req.text or ""
        if not text.strip():
            raise InputValidationError("Text required")

        locale = get_bundle(req.language).speech_locale
        if self.gateway.configured:
            try:
                prompt = build_prompt(
                    PromptKind.SPEECH_OPTIMIZATION, {"text": text, "language": req.language}, req.language
                )
                raw = await self.gateway.complete(prompt, max_tokens=600, temperature=0.3)
                return VoiceResponse(
                    text=parse_speech(raw, text),
                    language=locale,
                    instructions=SPEECH_INSTRUCTIONS,
                    optimized=True,
                )
            except GatewayError as e:
                logger.info("Voice optimization failed, using original text: {}", e)
            except Exception:
                logger.exception("Voice error")

        return VoiceResponse(
            text=text,
            language=locale,
            instructions=f"{SPEECH_INSTRUCTIONS} with specified language",
        )

    def voice_probe(self, language: Optional[str]) -> VoiceProbeResponse:
        lang = (language or "").strip() or "en"
        bundle = get_bundle(lang)
        return VoiceProbeResponse(
            message="Voice uses browser SpeechSynthesis API",
            test_text=bundle.voice_test,
            language=lang,
            speech_locale=bundle.speech_locale,
        )

    # ---- history / metadata ----

    def history(self, session_id: str) -> HistoryResponse:
        return HistoryResponse(
            count=self.store.count(session_id),
            history=self.store.recent(session_id, HISTORY_PAGE_SIZE),
        )

    def health(self) -> dict:
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "ai": {
                "model": self.gateway.model,
                "visionModel": self.gateway.vision_model,
                "status": "API Key configured" if self.gateway.configured else "API Key missing",
            },
            "features": ["voice", "image", "drugs", "health-info", "history", "multi-language"],
            "supported_languages": list(SUPPORTED_LANGUAGES),
            "endpoints": {
                "analyze": "POST /api/analyze",
                "voice": "POST /api/voice",
                "image": "POST /api/analyze-image",
                "drugs": "POST /api/drugs",
                "healthInfo": "POST /api/health-info",
                "history": "GET /api/history/:sessionId",
                "testVoice": "GET /api/test-voice",
            },
        }
