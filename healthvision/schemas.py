from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocalizedRequest(CamelModel):
    language: str = "en"

    @field_validator("language", mode="before")
    @classmethod
    def default_language(cls, value):
        if value is None or not str(value).strip():
            return "en"
        return str(value).strip()


class AnalysisRequest(LocalizedRequest):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    symptoms: Optional[str] = None
    age: Optional[str] = None  # numeric string, e.g. "34"
    gender: Optional[str] = None
    duration: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("age", mode="before")
    @classmethod
    def age_as_text(cls, value):
        if value is None:
            return None
        return str(value)


class AnalysisResult(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    possible_conditions: List[str]
    severity: str  # member of the language's Low/Medium/High/Emergency terms
    recommendations: List[str]
    requires_immediate_care: bool = False
    when_to_see_doctor: str
    self_care_tips: List[str]
    note: Optional[str] = None
    emergency_signs: List[str] = Field(default_factory=list)


class SessionHistoryEntry(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    timestamp: str
    symptoms: str
    age: Optional[str] = None
    gender: Optional[str] = None
    duration: Optional[str] = None
    language: str
    analysis: AnalysisResult


class AnalyzeResponse(CamelModel):
    success: bool = True
    session_id: str
    analysis: AnalysisResult
    model: str
    language: str
    note: Optional[str] = None


class ImageAnalysisResponse(CamelModel):
    success: bool = True
    analysis: AnalysisResult
    model: str
    language: str
    note: Optional[str] = None
    fallback: bool = False


class DrugCheckRequest(LocalizedRequest):
    medicines: Optional[List[str]] = None
    conditions: Optional[Union[str, List[str]]] = None
    allergies: Optional[Union[str, List[str]]] = None


class DrugCheckResult(CamelModel):
    interactions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    summary: str = ""
    note: Optional[str] = None


class DrugCheckResponse(CamelModel):
    success: bool = True
    analysis: DrugCheckResult
    model: str
    language: str
    fallback: bool = False


class HealthInfoRequest(LocalizedRequest):
    topic: Optional[str] = None


class HealthInfoResult(CamelModel):
    summary: str = ""
    key_points: List[str] = Field(default_factory=list)
    when_to_see_doctor: str = ""
    note: Optional[str] = None


class HealthInfoResponse(CamelModel):
    success: bool = True
    info: HealthInfoResult
    model: str
    language: str
    fallback: bool = False


class VoiceRequest(LocalizedRequest):
    text: Optional[str] = None


class VoiceResponse(CamelModel):
    success: bool = True
    text: str
    language: str  # speech locale such as "en-US"
    instructions: str
    optimized: bool = False


class HistoryResponse(CamelModel):
    success: bool = True
    count: int
    history: List[SessionHistoryEntry]


class VoiceProbeResponse(CamelModel):
    success: bool = True
    message: str
    test_text: str
    language: str
    speech_locale: str
