"""
Localization bundles.

Every user-visible canned text (severity terms, static fallback answers,
degraded-mode notes, the voice probe sentence) lives here, keyed by language
code. English is the universal fallback for codes without a bundle.
"""
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict


class LocaleBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    speech_locale: str
    # Ordered Low, Medium, High, Emergency
    severities: Tuple[str, str, str, str]

    # Generic static answer
    conditions: List[str]
    recommendations: List[str]
    when_to_see_doctor: str
    self_care_tips: List[str]
    note: str

    # Rule-table condition lists
    cardiac_conditions: List[str]
    migraine_conditions: List[str]
    viral_conditions: List[str]

    # Defaults used when fields are pulled out of free text
    extracted_conditions: List[str]
    extracted_recommendations: List[str]
    extracted_when_to_see_doctor: str
    extracted_self_care_tips: List[str]

    # Degraded-mode notes
    no_key_note: str
    gateway_error_note: str
    vision_unavailable_note: str
    image_unavailable_note: str
    drug_no_key: str
    drug_unavailable: str
    drug_recommendations: List[str]
    health_info_no_key: str
    health_info_unavailable: str
    voice_test: str

    @property
    def low(self) -> str:
        return self.severities[0]

    @property
    def medium(self) -> str:
        return self.severities[1]

    @property
    def high(self) -> str:
        return self.severities[2]

    @property
    def emergency(self) -> str:
        return self.severities[3]


_BUNDLES = [
    LocaleBundle(
        code="en",
        speech_locale="en-US",
        severities=("Low", "Medium", "High", "Emergency"),
        conditions=["Medical consultation recommended"],
        recommendations=[
            "Monitor symptoms closely",
            "Rest and stay hydrated",
            "Consult healthcare provider if symptoms worsen",
        ],
        when_to_see_doctor="Within 24-48 hours if symptoms persist",
        self_care_tips=["Drink plenty of fluids", "Get adequate rest", "Avoid triggers if known"],
        note="This is AI-generated information. Consult a healthcare professional for proper diagnosis.",
        cardiac_conditions=["Cardiac evaluation needed", "Musculoskeletal pain", "GERD"],
        migraine_conditions=["Migraine", "Tension headache", "Ocular migraine"],
        viral_conditions=["Viral infection", "Influenza", "Common cold"],
        extracted_conditions=["Consult healthcare provider"],
        extracted_recommendations=["Rest", "Monitor symptoms", "Seek medical advice"],
        extracted_when_to_see_doctor="If symptoms persist or worsen",
        extracted_self_care_tips=["Stay hydrated", "Get adequate rest"],
        no_key_note="Add OPENAI_API_KEY to .env for AI analysis",
        gateway_error_note="AI service error - using fallback analysis",
        vision_unavailable_note="Used text analysis (vision unavailable)",
        image_unavailable_note="Image analysis service unavailable. Please describe symptoms in text.",
        drug_no_key="Drug interaction check requires an API key in the .env file",
        drug_unavailable="Drug interaction check unavailable. Please consult a pharmacist or doctor.",
        drug_recommendations=["Consult a pharmacist or doctor before combining medicines"],
        health_info_no_key="Health information requires an API key in the .env file",
        health_info_unavailable="Health information is unavailable right now. Please consult a healthcare provider.",
        voice_test="HealthVision AI voice output is working correctly.",
    ),
    LocaleBundle(
        code="es",
        speech_locale="es-ES",
        severities=("Baja", "Media", "Alta", "Emergencia"),
        conditions=["Consulta médica recomendada"],
        recommendations=[
            "Controla los síntomas de cerca",
            "Descansa y mantente hidratado",
            "Consulta a un proveedor de atención médica si los síntomas empeoran",
        ],
        when_to_see_doctor="Dentro de 24-48 horas si los síntomas persisten",
        self_care_tips=["Bebe muchos líquidos", "Descansa adecuadamente", "Evita desencadenantes si se conocen"],
        note="Esta es información generada por IA. Consulte a un profesional de la salud para un diagnóstico adecuado.",
        cardiac_conditions=["Evaluación cardíaca necesaria", "Dolor musculoesquelético", "ERGE"],
        migraine_conditions=["Migraña", "Dolor de cabeza tensional", "Migraña ocular"],
        viral_conditions=["Infección viral", "Gripe", "Resfriado común"],
        extracted_conditions=["Consulte a un proveedor de atención médica"],
        extracted_recommendations=["Descansar", "Controlar los síntomas", "Buscar asesoramiento médico"],
        extracted_when_to_see_doctor="Si los síntomas persisten o empeoran",
        extracted_self_care_tips=["Mantenerse hidratado", "Descansar adecuadamente"],
        no_key_note="Agregue OPENAI_API_KEY al archivo .env para el análisis con IA",
        gateway_error_note="Error del servicio de IA - usando análisis de respaldo",
        vision_unavailable_note="Usado análisis de texto (visión no disponible)",
        image_unavailable_note="Análisis de imagen no disponible. Por favor describe los síntomas en texto.",
        drug_no_key="La verificación de interacciones de medicamentos requiere una clave API en el archivo .env",
        drug_unavailable="Verificación de interacciones de medicamentos no disponible. Consulte a un farmacéutico o médico.",
        drug_recommendations=["Consulte a un farmacéutico o médico antes de combinar medicamentos"],
        health_info_no_key="La información de salud requiere una clave API en el archivo .env",
        health_info_unavailable="La información de salud no está disponible ahora. Consulte a un profesional de la salud.",
        voice_test="La salida de voz de HealthVision AI funciona correctamente.",
    ),
    LocaleBundle(
        code="fr",
        speech_locale="fr-FR",
        severities=("Faible", "Moyenne", "Élevée", "Urgence"),
        conditions=["Consultation médicale recommandée"],
        recommendations=[
            "Surveillez attentivement les symptômes",
            "Reposez-vous et restez hydraté",
            "Consultez un professionnel de santé si les symptômes s'aggravent",
        ],
        when_to_see_doctor="Dans les 24-48 heures si les symptômes persistent",
        self_care_tips=["Buvez beaucoup de liquides", "Reposez-vous suffisamment", "Évitez les déclencheurs connus"],
        note="Ceci est une information générée par l'IA. Consultez un professionnel de la santé pour un diagnostic approprié.",
        cardiac_conditions=["Évaluation cardiaque nécessaire", "Douleur musculosquelettique", "RGO"],
        migraine_conditions=["Migraine", "Céphalée de tension", "Migraine oculaire"],
        viral_conditions=["Infection virale", "Grippe", "Rhume"],
        extracted_conditions=["Consultez un professionnel de santé"],
        extracted_recommendations=["Reposer", "Surveiller les symptômes", "Demander un avis médical"],
        extracted_when_to_see_doctor="Si les symptômes persistent ou s'aggravent",
        extracted_self_care_tips=["Rester hydraté", "Se reposer suffisamment"],
        no_key_note="Ajoutez OPENAI_API_KEY au fichier .env pour l'analyse par IA",
        gateway_error_note="Erreur du service IA - analyse de secours utilisée",
        vision_unavailable_note="Utilisé analyse de texte (vision non disponible)",
        image_unavailable_note="Analyse d'image non disponible. Veuillez décrire les symptômes en texte.",
        drug_no_key="La vérification des interactions médicamenteuses nécessite une clé API dans le fichier .env",
        drug_unavailable="Vérification des interactions médicamenteuses non disponible. Consultez un pharmacien ou un médecin.",
        drug_recommendations=["Consultez un pharmacien ou un médecin avant d'associer des médicaments"],
        health_info_no_key="Les informations de santé nécessitent une clé API dans le fichier .env",
        health_info_unavailable="Les informations de santé ne sont pas disponibles. Consultez un professionnel de santé.",
        voice_test="La sortie vocale de HealthVision AI fonctionne correctement.",
    ),
    LocaleBundle(
        code="ar",
        speech_locale="ar-SA",
        severities=("منخفضة", "متوسطة", "عالية", "طارئة"),
        conditions=["يوصى باستشارة طبية"],
        recommendations=[
            "راقب الأعراض عن كثب",
            "استرح وابق رطبًا",
            "استشر مقدم الرعاية الصحية إذا ساءت الأعراض",
        ],
        when_to_see_doctor="خلال 24-48 ساعة إذا استمرت الأعراض",
        self_care_tips=["اشرب الكثير من السوائل", "احصل على قسط كافٍ من الراحة", "تجنب المحفزات المعروفة"],
        note="هذه معلومات تم إنشاؤها بواسطة الذكاء الاصطناعي. استشر أخصائي رعاية صحية للتشخيص المناسب.",
        cardiac_conditions=["تقييم قلبي مطلوب", "ألم عضلي هيكلي", "ارتداد معدي مريئي"],
        migraine_conditions=["صداع نصفي", "صداع التوتر", "صداع نصفي بصري"],
        viral_conditions=["عدوى فيروسية", "إنفلونزا", "نزلة برد"],
        extracted_conditions=["استشر مقدم الرعاية الصحية"],
        extracted_recommendations=["الراحة", "مراقبة الأعراض", "طلب المشورة الطبية"],
        extracted_when_to_see_doctor="إذا استمرت الأعراض أو ساءت",
        extracted_self_care_tips=["حافظ على رطوبة جسمك", "احصل على قسط كافٍ من الراحة"],
        no_key_note="أضف OPENAI_API_KEY إلى ملف .env لتحليل الذكاء الاصطناعي",
        gateway_error_note="خطأ في خدمة الذكاء الاصطناعي - يتم استخدام التحليل الاحتياطي",
        vision_unavailable_note="تم استخدام التحليل النصي (الرؤية غير متاحة)",
        image_unavailable_note="خدمة تحليل الصور غير متاحة. يرجى وصف الأعراض نصيًا.",
        drug_no_key="يتطلب فحص التداخلات الدوائية مفتاح API في ملف .env",
        drug_unavailable="فحص التداخلات الدوائية غير متاح. يرجى استشارة صيدلي أو طبيب.",
        drug_recommendations=["استشر صيدليًا أو طبيبًا قبل الجمع بين الأدوية"],
        health_info_no_key="تتطلب المعلومات الصحية مفتاح API في ملف .env",
        health_info_unavailable="المعلومات الصحية غير متاحة حاليًا. يرجى استشارة مقدم رعاية صحية.",
        voice_test="الإخراج الصوتي لـ HealthVision AI يعمل بشكل صحيح.",
    ),
    LocaleBundle(
        code="hi",
        speech_locale="hi-IN",
        severities=("कम", "मध्यम", "उच्च", "आपातकालीन"),
        conditions=["चिकित्सकीय परामर्श की सिफारिश की गई"],
        recommendations=[
            "लक्षणों की बारीकी से निगरानी करें",
            "आराम करें और हाइड्रेटेड रहें",
            "यदि लक्षण बिगड़ते हैं तो स्वास्थ्य सेवा प्रदाता से परामर्श करें",
        ],
        when_to_see_doctor="24-48 घंटों के भीतर यदि लक्षण बने रहते हैं",
        self_care_tips=["भरपूर मात्रा में तरल पदार्थ पिएं", "पर्याप्त आराम करें", "यदि ज्ञात हो तो ट्रिगर्स से बचें"],
        note="यह एआई-जनित जानकारी है। उचित निदान के लिए किसी स्वास्थ्य देखभाल पेशेवर से परामर्श करें।",
        cardiac_conditions=["हृदय मूल्यांकन आवश्यक", "मस्कुलोस्केलेटल दर्द", "जीईआरडी"],
        migraine_conditions=["माइग्रेन", "टेंशन सिरदर्द", "नेत्र माइग्रेन"],
        viral_conditions=["वायरल संक्रमण", "इन्फ्लुएंजा", "सामान्य सर्दी"],
        extracted_conditions=["स्वास्थ्य सेवा प्रदाता से परामर्श करें"],
        extracted_recommendations=["आराम करें", "लक्षणों की निगरानी करें", "चिकित्सा सलाह लें"],
        extracted_when_to_see_doctor="यदि लक्षण बने रहें या बिगड़ें",
        extracted_self_care_tips=["हाइड्रेटेड रहें", "पर्याप्त आराम करें"],
        no_key_note="एआई विश्लेषण के लिए .env फ़ाइल में OPENAI_API_KEY जोड़ें",
        gateway_error_note="एआई सेवा त्रुटि - वैकल्पिक विश्लेषण का उपयोग",
        vision_unavailable_note="पाठ विश्लेषण का उपयोग किया गया (विज़न उपलब्ध नहीं)",
        image_unavailable_note="छवि विश्लेषण सेवा उपलब्ध नहीं है। कृपया लक्षणों का पाठ में वर्णन करें।",
        drug_no_key="दवा इंटरैक्शन जांच के लिए .env फ़ाइल में API कुंजी आवश्यक है",
        drug_unavailable="दवा इंटरैक्शन जांच उपलब्ध नहीं है। कृपया फार्मासिस्ट या डॉक्टर से परामर्श करें।",
        drug_recommendations=["दवाएं साथ लेने से पहले फार्मासिस्ट या डॉक्टर से परामर्श करें"],
        health_info_no_key="स्वास्थ्य जानकारी के लिए .env फ़ाइल में API कुंजी आवश्यक है",
        health_info_unavailable="स्वास्थ्य जानकारी अभी उपलब्ध नहीं है। कृपया स्वास्थ्य सेवा प्रदाता से परामर्श करें।",
        voice_test="HealthVision AI वॉयस आउटपुट सही ढंग से काम कर रहा है।",
    ),
]

BUNDLES: Dict[str, LocaleBundle] = {bundle.code: bundle for bundle in _BUNDLES}
SUPPORTED_LANGUAGES: Tuple[str, ...] = tuple(BUNDLES)
DEFAULT_LANGUAGE = "en"


def get_bundle(language: str) -> LocaleBundle:
    """Bundle for a language code, English when the code is unknown."""
    code = (language or "").strip().lower()
    return BUNDLES.get(code, BUNDLES[DEFAULT_LANGUAGE])
