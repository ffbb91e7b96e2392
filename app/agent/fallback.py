"""
Deterministic answers used when the remote model cannot produce one.

Greetings get a fixed introduction. Anything else gets the retrieved context
verbatim (or a "no answer" note) plus human-assistance contacts, so the farmer
always receives something useful. Every string exists in English, Hindi and
Marathi; unknown language codes fall back to English.
"""

from app.services.language_service import Language

GREETINGS: frozenset[str] = frozenset({
    "hello",
    "hi",
    "hey",
    "namaste",
    "namaskar",
    "ram ram",
    "sat sri akal",
    "greetings",
})

GREETING_REPLY: dict[Language, str] = {
    Language.EN: (
        "Namaste! I am Krishi Mitra, your farming assistant. Ask me about crops, weather, "
        "pest control, mandi prices or soil health."
    ),
    Language.HI: (
        "नमस्ते! मैं कृषि मित्र हूँ, आपका खेती सहायक। आप मुझसे फसल, मौसम, कीट नियंत्रण, "
        "मंडी भाव या मिट्टी के बारे में पूछ सकते हैं।"
    ),
    Language.MR: (
        "नमस्कार! मी कृषी मित्र, तुमचा शेती सहाय्यक. पीक, हवामान, कीड नियंत्रण, "
        "बाजार भाव किंवा मातीबद्दल मला विचारा."
    ),
}

NO_ANSWER_INTRO: dict[Language, str] = {
    Language.EN: "Thank you for your question: \"{query}\". I could not find a verified answer for this right now.",
    Language.HI: "आपके प्रश्न के लिए धन्यवाद: \"{query}\"। अभी मुझे इसका पक्का उत्तर नहीं मिल पाया।",
    Language.MR: "तुमच्या प्रश्नाबद्दल धन्यवाद: \"{query}\". सध्या मला याचे खात्रीशीर उत्तर सापडले नाही.",
}

CONTEXT_INTRO: dict[Language, str] = {
    Language.EN: "Here is what I found in our farming knowledge base:",
    Language.HI: "हमारे कृषि ज्ञान कोष में मुझे यह जानकारी मिली:",
    Language.MR: "आमच्या कृषी ज्ञानकोशात मला ही माहिती मिळाली:",
}

CONTACT_HELP: dict[Language, str] = {
    Language.EN: (
        "For more help:\n"
        "- Call the Kisan Call Centre (toll-free): 1800-180-1551\n"
        "- Visit your nearest Krishi Vigyan Kendra or agriculture extension office"
    ),
    Language.HI: (
        "अधिक सहायता के लिए:\n"
        "- किसान कॉल सेंटर (टोल-फ्री) पर कॉल करें: 1800-180-1551\n"
        "- अपने नज़दीकी कृषि विज्ञान केंद्र या कृषि विस्तार कार्यालय जाएँ"
    ),
    Language.MR: (
        "अधिक मदतीसाठी:\n"
        "- किसान कॉल सेंटरला (टोल-फ्री) कॉल करा: 1800-180-1551\n"
        "- जवळच्या कृषी विज्ञान केंद्र किंवा कृषी विस्तार कार्यालयाला भेट द्या"
    ),
}

APOLOGY: dict[Language, str] = {
    Language.EN: "Sorry for the inconvenience.",
    Language.HI: "असुविधा के लिए क्षमा करें।",
    Language.MR: "गैरसोयीबद्दल क्षमस्व.",
}

TIMEOUT_MESSAGE: dict[Language, str] = {
    Language.EN: "The AI service is taking too long to respond. Please try again in a minute.",
    Language.HI: "एआई सेवा जवाब देने में बहुत समय ले रही है। कृपया एक मिनट बाद फिर से प्रयास करें।",
    Language.MR: "एआय सेवा उत्तर देण्यासाठी खूप वेळ घेत आहे. कृपया एका मिनिटाने पुन्हा प्रयत्न करा.",
}


def _locale(language: Language | str | None) -> Language:
    if isinstance(language, Language):
        return language
    return Language.parse(language) or Language.EN


def is_greeting(query: str) -> bool:
    return (query or "").strip().lower() in GREETINGS


def compose_fallback(query: str, context: list[str], language: Language | str | None) -> str:
    lang = _locale(language)
    if is_greeting(query):
        return GREETING_REPLY[lang]
    if not context:
        return "\n\n".join([
            NO_ANSWER_INTRO[lang].format(query=query.strip()),
            CONTACT_HELP[lang],
            APOLOGY[lang],
        ])
    return "\n\n".join([CONTEXT_INTRO[lang], "\n\n".join(context), CONTACT_HELP[lang]])


def timeout_message(language: Language | str | None) -> str:
    return TIMEOUT_MESSAGE[_locale(language)]
