"""
Response Normalizer.

Turns whatever the model replied into a complete, schema-valid result:

1. direct JSON extraction (with a best-effort repair retry),
2. keyword/regex extraction from free text,
3. a static, pre-localized rule-table answer when there is no model output,
4. validation against the language's defaults and severity terms.

Nothing in here raises to the caller except ``repair_json``, which is
expected to fail and is only used behind ``extract_json_object``.
"""
import json
import re
from typing import Dict, List, Optional

from loguru import logger

from healthvision.errors import ParseError
from healthvision.locales import LocaleBundle, get_bundle
from healthvision.schemas import AnalysisResult, DrugCheckResult, HealthInfoResult

MAX_SENTENCES_PER_FIELD = 3

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_BARE_KEY_RE = re.compile(r"(\w+):")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")

# Checked in this order, first match wins.
SEVERITY_KEYWORDS = [
    ("emergency", re.compile(r"emergency|911|urgent|immediate", re.IGNORECASE)),
    ("high", re.compile(r"high|severe|serious", re.IGNORECASE)),
    ("medium", re.compile(r"medium|moderate", re.IGNORECASE)),
]

FIELD_KEYWORDS = {
    "recommendations": ["immediately", "right now", "should", "recommend"],
    "self_care_tips": ["rest", "drink", "hydrat", "avoid", "home"],
    "possible_conditions": ["may be", "could be", "possible", "likely", "suggest"],
    "when_to_see_doctor": ["doctor", "physician", "healthcare provider", "seek medical"],
}

EMERGENCY_SIGNS = [
    "chest pain",
    "difficulty breathing",
    "shortness of breath",
    "severe bleeding",
    "loss of consciousness",
    "fainting",
    "stroke",
    "heart attack",
    "seizure",
    "suicidal",
]

LIST_FIELDS = ("possible_conditions", "recommendations", "self_care_tips")
TEXT_FIELDS = ("when_to_see_doctor", "note")


# ---- step 1: JSON extraction ----

def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def repair_json(candidate: str) -> Dict:
    """Heuristic repair: quote coercion and bare-key quoting, then parse.

    Blind substitution; apostrophes inside values get mangled. Raises
    ``ParseError`` when the repaired text still does not parse to an object.
    """
    repaired = _strip_fences(candidate)
    repaired = repaired.replace("'", '"')
    repaired = _BARE_KEY_RE.sub(r'"\1":', repaired)
    try:
        parsed = json.loads(repaired)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"Repaired JSON still invalid: {e}") from e
    if not isinstance(parsed, dict):
        raise ParseError("Repaired JSON is not an object")
    return parsed


def extract_json_object(raw_text: str) -> Optional[Dict]:
    """Greedy first-``{`` to last-``}`` JSON object in ``raw_text``, or None."""
    if not raw_text:
        return None
    match = _OBJECT_RE.search(_strip_fences(raw_text))
    if not match:
        return None
    candidate = match.group(0)

    try:
        parsed = json.loads(candidate)
        if isinstance(parsed, dict):
            return parsed
    except (ValueError, RecursionError) as e:
        logger.warning("JSON parse error: {}", e)

    try:
        return repair_json(candidate)
    except ParseError as e:
        logger.warning("{}; raw JSON string: {}", e, candidate[:200])
        return None


# ---- step 2: heuristic extraction ----

def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text or "") if s and s.strip()]


def _sentences_with(sentences: List[str], keywords: List[str], limit: int) -> List[str]:
    picked = []
    for sentence in sentences:
        lower = sentence.lower()
        if any(kw in lower for kw in keywords):
            picked.append(sentence)
            if len(picked) >= limit:
                break
    return picked


def detect_severity(text: str, bundle: LocaleBundle) -> str:
    for rank, pattern in SEVERITY_KEYWORDS:
        if pattern.search(text or ""):
            return getattr(bundle, rank)
    return bundle.low


def find_emergency_signs(text: str) -> List[str]:
    lower = (text or "").lower()
    return [sign for sign in EMERGENCY_SIGNS if sign in lower]


def extract_from_text(text: str, language: str) -> Dict:
    """Best-effort fields from a free-text reply (keywords are English)."""
    logger.info("Extracting analysis from text response in {}", language)
    bundle = get_bundle(language)
    sentences = split_sentences(text)

    conditions = _sentences_with(sentences, FIELD_KEYWORDS["possible_conditions"], MAX_SENTENCES_PER_FIELD)
    recommendations = _sentences_with(sentences, FIELD_KEYWORDS["recommendations"], MAX_SENTENCES_PER_FIELD)
    tips = _sentences_with(sentences, FIELD_KEYWORDS["self_care_tips"], MAX_SENTENCES_PER_FIELD)
    doctor = _sentences_with(sentences, FIELD_KEYWORDS["when_to_see_doctor"], 1)

    severity = detect_severity(text, bundle)
    signs = find_emergency_signs(text)

    return {
        "possibleConditions": conditions or list(bundle.extracted_conditions),
        "severity": severity,
        "recommendations": recommendations or list(bundle.extracted_recommendations),
        "requiresImmediateCare": severity == bundle.emergency or bool(signs),
        "whenToSeeDoctor": doctor[0] if doctor else bundle.extracted_when_to_see_doctor,
        "selfCareTips": tips or list(bundle.extracted_self_care_tips),
        "emergencySigns": signs,
    }


# ---- step 3: static fallback ----

def fallback_analysis(symptoms: Optional[str], language: str) -> AnalysisResult:
    """Canned answer chosen by literal substring rules on the symptom text."""
    bundle = get_bundle(language)
    text = (symptoms or "").lower()

    conditions = bundle.conditions
    severity = bundle.medium
    immediate = False

    if "chest" in text and "pain" in text:
        conditions = bundle.cardiac_conditions
        severity = bundle.emergency
        immediate = "severe" in text or "radiating" in text
    elif "headache" in text and "vision" in text:
        conditions = bundle.migraine_conditions
        severity = bundle.medium
    elif "fever" in text and "cough" in text:
        conditions = bundle.viral_conditions
        severity = bundle.low

    return AnalysisResult(
        possible_conditions=list(conditions),
        severity=severity,
        recommendations=list(bundle.recommendations),
        requires_immediate_care=immediate,
        when_to_see_doctor=bundle.when_to_see_doctor,
        self_care_tips=list(bundle.self_care_tips),
        note=bundle.note,
    )


# ---- step 4: validation ----

def _as_text(item) -> str:
    if isinstance(item, dict):
        for key in ("name", "condition", "title", "text"):
            if isinstance(item.get(key), str):
                return item[key]
        return ", ".join(str(v) for v in item.values())
    return str(item)


def _as_text_list(value, default: List[str]) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return list(default)
    return [_as_text(item).strip() for item in value if item is not None and _as_text(item).strip()]


def _as_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes")
    return default


def normalize_severity(value, bundle: LocaleBundle) -> str:
    if isinstance(value, str):
        if value in bundle.severities:
            return value
        folded = value.strip().casefold()
        for term in bundle.severities:
            if term.casefold() == folded:
                return term
    return bundle.medium


def _lookup(candidate: Dict, snake: str):
    parts = snake.split("_")
    camel = parts[0] + "".join(p.title() for p in parts[1:])
    if camel in candidate:
        return camel, candidate[camel]
    if snake in candidate:
        return snake, candidate[snake]
    return None, None


def normalize_analysis(candidate, symptoms: Optional[str], language: str) -> AnalysisResult:
    """Merge ``candidate`` over the language defaults into an AnalysisResult."""
    if not isinstance(candidate, dict):
        return fallback_analysis(symptoms, language)

    bundle = get_bundle(language)
    default = fallback_analysis("", language)
    data = default.model_dump()

    for field in LIST_FIELDS:
        key, value = _lookup(candidate, field)
        if key is not None:
            data[field] = _as_text_list(value, getattr(default, field))

    for field in TEXT_FIELDS:
        key, value = _lookup(candidate, field)
        if key is not None and isinstance(value, str) and value.strip():
            data[field] = value.strip()

    _, immediate = _lookup(candidate, "requires_immediate_care")
    data["requires_immediate_care"] = _as_bool(immediate, default.requires_immediate_care)

    _, signs = _lookup(candidate, "emergency_signs")
    data["emergency_signs"] = _as_text_list(signs, [])

    _, severity = _lookup(candidate, "severity")
    data["severity"] = normalize_severity(severity, bundle)

    return AnalysisResult(**data)


def parse_analysis(raw_text: str, symptoms: Optional[str], language: str) -> AnalysisResult:
    """Steps 1, 2 and 4 over a model reply. Never raises."""
    candidate = extract_json_object(raw_text)
    if candidate is None:
        candidate = extract_from_text(raw_text, language)
    else:
        logger.info("Successfully parsed JSON response")
    return normalize_analysis(candidate, symptoms, language)


# ---- other task kinds ----

def fallback_drug_check(language: str, unavailable: bool = False) -> DrugCheckResult:
    bundle = get_bundle(language)
    return DrugCheckResult(
        summary=bundle.drug_unavailable if unavailable else bundle.drug_no_key,
        recommendations=list(bundle.drug_recommendations),
        note=bundle.note,
    )


def parse_drug_check(raw_text: str, language: str) -> DrugCheckResult:
    bundle = get_bundle(language)
    candidate = extract_json_object(raw_text)
    if candidate is None:
        return DrugCheckResult(
            summary=(raw_text or "").strip() or bundle.drug_unavailable,
            recommendations=list(bundle.drug_recommendations),
            note=bundle.note,
        )
    summary = candidate.get("summary")
    return DrugCheckResult(
        interactions=_as_text_list(candidate.get("interactions"), []),
        warnings=_as_text_list(candidate.get("warnings"), []),
        recommendations=_as_text_list(candidate.get("recommendations"), bundle.drug_recommendations),
        summary=summary.strip() if isinstance(summary, str) else "",
        note=bundle.note,
    )


def fallback_health_info(language: str, unavailable: bool = False) -> HealthInfoResult:
    bundle = get_bundle(language)
    return HealthInfoResult(
        summary=bundle.health_info_unavailable if unavailable else bundle.health_info_no_key,
        key_points=list(bundle.self_care_tips),
        when_to_see_doctor=bundle.when_to_see_doctor,
        note=bundle.note,
    )


def parse_health_info(raw_text: str, language: str) -> HealthInfoResult:
    bundle = get_bundle(language)
    candidate = extract_json_object(raw_text)
    if candidate is None:
        sentences = split_sentences(raw_text)
        return HealthInfoResult(
            summary=(raw_text or "").strip() or bundle.health_info_unavailable,
            key_points=sentences[:MAX_SENTENCES_PER_FIELD],
            when_to_see_doctor=bundle.when_to_see_doctor,
            note=bundle.note,
        )
    summary = candidate.get("summary")
    doctor = candidate.get("whenToSeeDoctor")
    return HealthInfoResult(
        summary=summary.strip() if isinstance(summary, str) else "",
        key_points=_as_text_list(candidate.get("keyPoints"), []),
        when_to_see_doctor=doctor.strip() if isinstance(doctor, str) and doctor.strip() else bundle.when_to_see_doctor,
        note=bundle.note,
    )


def parse_speech(raw_text: str, original: str) -> str:
    candidate = extract_json_object(raw_text)
    if candidate is not None and isinstance(candidate.get("text"), str) and candidate["text"].strip():
        return candidate["text"].strip()
    text = _strip_fences(raw_text or "").strip().strip('"')
    return text or original
