"""
Prompt Builder.

One template per (task kind, language). Templates are plain ``str.format``
text; a line whose placeholder has no value is dropped instead of rendered
half-empty. Every template closes with the JSON shape the model must reply
with.
"""
from enum import Enum
from string import Formatter
from typing import Dict, Mapping, Optional

from healthvision.locales import DEFAULT_LANGUAGE, get_bundle

SPEECH_TEXT_LIMIT = 500


class PromptKind(str, Enum):
    SYMPTOM_ANALYSIS = "symptom-analysis"
    IMAGE_ANALYSIS = "image-analysis"
    DRUG_INTERACTION = "drug-interaction"
    HEALTH_INFO = "health-info"
    SPEECH_OPTIMIZATION = "speech-optimization"


def _analysis_shape(language: str, or_word: str) -> str:
    severities = f" {or_word} ".join(get_bundle(language).severities)
    return (
        "{{\n"
        '  "possibleConditions": ["...", "...", "..."],\n'
        f'  "severity": "{severities}",\n'
        '  "recommendations": ["...", "...", "..."],\n'
        f'  "requiresImmediateCare": true {or_word} false,\n'
        '  "whenToSeeDoctor": "...",\n'
        '  "selfCareTips": ["...", "...", "..."]\n'
        "}}"
    )


_DRUG_SHAPE = (
    "{{\n"
    '  "interactions": ["..."],\n'
    '  "warnings": ["..."],\n'
    '  "recommendations": ["..."],\n'
    '  "summary": "..."\n'
    "}}"
)

_HEALTH_INFO_SHAPE = (
    "{{\n"
    '  "summary": "...",\n'
    '  "keyPoints": ["...", "...", "..."],\n'
    '  "whenToSeeDoctor": "..."\n'
    "}}"
)

_SPEECH_SHAPE = '{{"text": "..."}}'


TEMPLATES: Dict[PromptKind, Dict[str, str]] = {
    PromptKind.SYMPTOM_ANALYSIS: {
        "en": (
            "You are a medical AI assistant. Analyze these symptoms in English:\n"
            "\n"
            'SYMPTOMS: "{symptoms}"\n'
            "AGE: {age}\n"
            "GENDER: {gender}\n"
            "DURATION: {duration}\n"
            "PREVIOUS VISITS IN THIS SESSION: {history}\n"
            "\n"
            "Provide a detailed medical analysis. Return ONLY valid JSON in this exact format:\n"
            + _analysis_shape("en", "or") + "\n"
            "\n"
            "IMPORTANT: Make it specific to these exact symptoms. Do not give generic advice. "
            "Reply with the JSON object only."
        ),
        "es": (
            "Eres un asistente médico de IA. Analiza estos síntomas en español:\n"
            "\n"
            'SÍNTOMAS: "{symptoms}"\n'
            "EDAD: {age}\n"
            "GÉNERO: {gender}\n"
            "DURACIÓN: {duration}\n"
            "CONSULTAS ANTERIORES EN ESTA SESIÓN: {history}\n"
            "\n"
            "Proporciona un análisis médico detallado. Devuelve SOLAMENTE JSON válido en este formato exacto:\n"
            + _analysis_shape("es", "o") + "\n"
            "\n"
            "IMPORTANTE: Hazlo específico para estos síntomas exactos. No des consejos genéricos. "
            "Responde solo con el objeto JSON."
        ),
        "fr": (
            "Vous êtes un assistant médical IA. Analysez ces symptômes en français:\n"
            "\n"
            'SYMPTÔMES: "{symptoms}"\n'
            "ÂGE: {age}\n"
            "GENRE: {gender}\n"
            "DURÉE: {duration}\n"
            "CONSULTATIONS PRÉCÉDENTES DANS CETTE SESSION: {history}\n"
            "\n"
            "Fournissez une analyse médicale détaillée. Retournez UNIQUEMENT du JSON valide dans ce format exact:\n"
            + _analysis_shape("fr", "ou") + "\n"
            "\n"
            "IMPORTANT: Rendez-le spécifique à ces symptômes exacts. Ne donnez pas de conseils génériques. "
            "Répondez uniquement avec l'objet JSON."
        ),
        "ar": (
            "أنت مساعد طبي بالذكاء الاصطناعي. حلل هذه الأعراض باللغة العربية:\n"
            "\n"
            'الأعراض: "{symptoms}"\n'
            "العمر: {age}\n"
            "الجنس: {gender}\n"
            "المدة: {duration}\n"
            "الاستشارات السابقة في هذه الجلسة: {history}\n"
            "\n"
            "قدم تحليلاً طبيًا مفصلاً. أعد JSON صالحًا فقط بهذا التنسيق الدقيق:\n"
            + _analysis_shape("ar", "أو") + "\n"
            "\n"
            "هام: اجعلها محددة لهذه الأعراض بالضبط. لا تقدم نصائح عامة. أجب بكائن JSON فقط."
        ),
        "hi": (
            "आप एक मेडिकल एआई सहायक हैं। इन लक्षणों का हिंदी में विश्लेषण करें:\n"
            "\n"
            'लक्षण: "{symptoms}"\n'
            "आयु: {age}\n"
            "लिंग: {gender}\n"
            "अवधि: {duration}\n"
            "इस सत्र की पिछली जांचें: {history}\n"
            "\n"
            "विस्तृत चिकित्सा विश्लेषण प्रदान करें। केवल इस सटीक प्रारूप में वैध JSON लौटाएं:\n"
            + _analysis_shape("hi", "या") + "\n"
            "\n"
            "महत्वपूर्ण: इन विशिष्ट लक्षणों के लिए विशिष्ट बनाएं। सामान्य सलाह न दें। केवल JSON ऑब्जेक्ट लौटाएं।"
        ),
    },
    PromptKind.IMAGE_ANALYSIS: {
        "en": (
            "You are a medical AI assistant. Analyze the attached medical image in English.\n"
            'PATIENT DESCRIPTION: "{symptoms}"\n'
            "\n"
            "Describe visible findings and return ONLY valid JSON in this exact format:\n"
            + _analysis_shape("en", "or")
        ),
        "es": (
            "Eres un asistente médico de IA. Analiza la imagen médica adjunta en español.\n"
            'DESCRIPCIÓN DEL PACIENTE: "{symptoms}"\n'
            "\n"
            "Describe los hallazgos visibles y devuelve SOLAMENTE JSON válido en este formato exacto:\n"
            + _analysis_shape("es", "o")
        ),
        "fr": (
            "Vous êtes un assistant médical IA. Analysez l'image médicale jointe en français.\n"
            'DESCRIPTION DU PATIENT: "{symptoms}"\n'
            "\n"
            "Décrivez les observations visibles et retournez UNIQUEMENT du JSON valide dans ce format exact:\n"
            + _analysis_shape("fr", "ou")
        ),
    },
    PromptKind.DRUG_INTERACTION: {
        "en": (
            "Check drug interactions for medications: {medicines}\n"
            "Medical conditions: {conditions}\n"
            "Allergies: {allergies}\n"
            "\n"
            "Provide safety analysis and recommendations in English. "
            "Return ONLY valid JSON in this exact format:\n"
            + _DRUG_SHAPE
        ),
        "es": (
            "Verifica interacciones de medicamentos para: {medicines}\n"
            "Condiciones médicas: {conditions}\n"
            "Alergias: {allergies}\n"
            "\n"
            "Proporciona análisis de seguridad y recomendaciones en español. "
            "Devuelve SOLAMENTE JSON válido en este formato exacto:\n"
            + _DRUG_SHAPE
        ),
        "fr": (
            "Vérifiez les interactions médicamenteuses pour: {medicines}\n"
            "Conditions médicales: {conditions}\n"
            "Allergies: {allergies}\n"
            "\n"
            "Fournissez une analyse de sécurité et des recommandations en français. "
            "Retournez UNIQUEMENT du JSON valide dans ce format exact:\n"
            + _DRUG_SHAPE
        ),
    },
    PromptKind.HEALTH_INFO: {
        "en": (
            "You are a health educator. Explain this health topic in plain English for a patient:\n"
            'TOPIC: "{topic}"\n'
            "\n"
            "Return ONLY valid JSON in this exact format:\n"
            + _HEALTH_INFO_SHAPE
        ),
        "es": (
            "Eres un educador de salud. Explica este tema de salud en español sencillo para un paciente:\n"
            'TEMA: "{topic}"\n'
            "\n"
            "Devuelve SOLAMENTE JSON válido en este formato exacto:\n"
            + _HEALTH_INFO_SHAPE
        ),
        "fr": (
            "Vous êtes un éducateur en santé. Expliquez ce sujet de santé en français simple pour un patient:\n"
            'SUJET: "{topic}"\n'
            "\n"
            "Retournez UNIQUEMENT du JSON valide dans ce format exact:\n"
            + _HEALTH_INFO_SHAPE
        ),
    },
    PromptKind.SPEECH_OPTIMIZATION: {
        "en": (
            "Optimize this medical text for speech synthesis in {language}. "
            "Make it clear, with pauses, and easy to understand when spoken:\n"
            "\n"
            '"{text}"\n'
            "\n"
            "Return ONLY valid JSON in this exact format:\n"
            + _SPEECH_SHAPE
        ),
        "es": (
            "Optimiza este texto médico para síntesis de voz en {language}. "
            "Hazlo claro, con pausas y fácil de entender al escucharlo:\n"
            "\n"
            '"{text}"\n'
            "\n"
            "Devuelve SOLAMENTE JSON válido en este formato exacto:\n"
            + _SPEECH_SHAPE
        ),
        "fr": (
            "Optimisez ce texte médical pour la synthèse vocale en {language}. "
            "Rendez-le clair, avec des pauses, et facile à comprendre à l'oral:\n"
            "\n"
            '"{text}"\n'
            "\n"
            "Retournez UNIQUEMENT du JSON valide dans ce format exact:\n"
            + _SPEECH_SHAPE
        ),
    },
}

_formatter = Formatter()


def _as_field(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v).strip() for v in value if v is not None and str(v).strip())
    text = str(value).strip()
    return text or None


def _render_line(line: str, values: Mapping[str, Optional[str]]) -> Optional[str]:
    names = [name for _, name, _, _ in _formatter.parse(line) if name is not None]
    if any(values.get(name) is None for name in names):
        return None
    return line.format(**{name: values[name] for name in names})


def get_template(kind: PromptKind, language: str) -> str:
    try:
        per_language = TEMPLATES[PromptKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown prompt kind: {kind!r}")
    code = (language or "").strip().lower()
    return per_language.get(code, per_language[DEFAULT_LANGUAGE])


def build_prompt(kind: PromptKind, fields: Mapping[str, object], language: str) -> str:
    """Render the template for ``kind`` in ``language`` (English when missing).

    Lists are joined with ", ". Lines referring to a field that is absent or
    blank are left out of the prompt.
    """
    template = get_template(kind, language)
    values = {name: _as_field(value) for name, value in fields.items()}
    if "text" in values and values["text"] is not None:
        values["text"] = values["text"][:SPEECH_TEXT_LIMIT]

    lines = []
    for line in template.split("\n"):
        rendered = _render_line(line, values)
        if rendered is not None:
            lines.append(rendered)
    return "\n".join(lines)
