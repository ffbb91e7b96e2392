"""
Prompt assembly for the remote model.

Two templates: "instruct" (User:/Assistant: turns for the chat model) and
"vision" (one continuous prompt, no role markers, for the image model).
"""

from enum import Enum

from app.services.language_service import Language

SYSTEM_PERSONA = """You are Krishi Mitra, a friendly and knowledgeable agricultural assistant for Indian farmers.

Guidelines:
- Give practical, actionable advice suited to small and marginal farmers in India.
- Prefer the information in the knowledge base context when it is provided; do not invent prices, dosages or dates.
- For pesticides and chemicals, always mention safe handling, the recommended dose and protective clothing.
- If you are not sure, say so and suggest contacting the Kisan Call Centre (1800-180-1551) or the nearest Krishi Vigyan Kendra.
- If an image is provided, describe what you see on the crop or leaf before giving advice.

Formatting:
- Keep answers short: at most 5-6 sentences or a few bullet points.
- Use simple words a farmer can understand; avoid jargon.
- Mention units (per acre, per hectare, per quintal) wherever numbers are given."""

LANGUAGE_DIRECTIVES: dict[Language, str] = {
    Language.HI: "IMPORTANT: Respond in Hindi (हिंदी में उत्तर दें). Use simple Hindi words.",
    Language.MR: "IMPORTANT: Respond in Marathi (मराठीत उत्तर द्या). Use simple Marathi words.",
    Language.EN: "IMPORTANT: Respond in simple English.",
}

TRANSLATION_TARGETS: dict[Language, str] = {
    Language.HI: "Hindi",
    Language.MR: "Marathi",
    Language.EN: "English",
}

CONTEXT_HEADER = "CONTEXT FROM KNOWLEDGE BASE:"
CONTEXT_DELIMITER = "---"


class PromptTemplate(str, Enum):
    INSTRUCT = "instruct"
    VISION = "vision"

    @classmethod
    def for_request(cls, has_image: bool) -> "PromptTemplate":
        return cls.VISION if has_image else cls.INSTRUCT


def language_directive(target_language: Language | str | None) -> str:
    """One of the three fixed directives; unknown codes get the English one."""
    lang = target_language if isinstance(target_language, Language) else Language.parse(target_language)
    return LANGUAGE_DIRECTIVES.get(lang or Language.EN, LANGUAGE_DIRECTIVES[Language.EN])


def format_context(context: list[str]) -> str:
    """Delimited knowledge-base block, or "" when there is nothing to ground on."""
    if not context:
        return ""
    body = "\n\n".join(context)
    return f"{CONTEXT_HEADER}\n{CONTEXT_DELIMITER}\n{body}\n{CONTEXT_DELIMITER}\n\n"


def build_prompt(
    query: str,
    context: list[str],
    target_language: Language | str | None,
    has_image: bool,
) -> str:
    context_block = format_context(context)
    directive = language_directive(target_language)
    if PromptTemplate.for_request(has_image) is PromptTemplate.VISION:
        return f"{SYSTEM_PERSONA}\n\n{directive}\n\n{context_block}Farmer's question: {query}"
    return (
        f"{SYSTEM_PERSONA}\n\n"
        f"User: {context_block}Farmer's question: {query}\n\n{directive}\n\n"
        "Assistant:"
    )


def build_translation_prompt(text: str, target_language: Language | str | None) -> str:
    """Instruct-template prompt asking for a bare translation."""
    lang = target_language if isinstance(target_language, Language) else Language.parse(target_language)
    target = TRANSLATION_TARGETS[lang or Language.EN]
    return (
        f"User: Translate the following text to {target}. "
        f"Return ONLY the translated text, no explanations.\n\nText: {text}\n\n"
        "Assistant:"
    )
