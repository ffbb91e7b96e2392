"""
Language detection and dictionary annotation for Hindi / Marathi queries.

Detection is a script + marker-word heuristic, not a statistical classifier.
Annotation tags known farming terms with their English meaning so the English
keyword retriever and the model get usable hints; it is not translation.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class Language(str, Enum):
    EN = "en"
    HI = "hi"
    MR = "mr"

    @classmethod
    def parse(cls, code: str | None) -> "Language | None":
        """Decode a client supplied language code; unknown or empty codes give None."""
        code = (code or "").strip().lower()
        for lang in cls:
            if lang.value == code:
                return lang
        return None


DEVANAGARI_START = "\u0900"
DEVANAGARI_END = "\u097f"

HINDI_MARKERS: tuple[str, ...] = (
    "क्या", "है", "में", "को", "की", "का", "और", "से", "पर", "कैसे",
    "खेती", "फसल", "मंडी", "किसान", "बारिश", "मिट्टी", "कीट", "रोग",
    "आज", "कल", "अभी", "कितना", "कौन", "कहाँ", "भाव", "पानी",
)

MARATHI_MARKERS: tuple[str, ...] = (
    "काय", "आहे", "मध्ये", "ला", "ची", "चा", "आणि", "वर", "कसा",
    "शेती", "पीक", "बाजार", "शेतकरी", "पाऊस", "माती", "कीड", "रोग",
    "आज", "उद्या", "आता", "किती", "कोण", "कुठे", "भाव",
)

# Devanagari farming terms -> English meaning. Insertion order is the hint order.
DEVANAGARI_TO_ENGLISH: dict[str, str] = {
    "गेहूं": "wheat",
    "धान": "rice/paddy",
    "टमाटर": "tomato",
    "प्याज": "onion",
    "आलू": "potato",
    "मंडी": "market/mandi",
    "भाव": "price",
    "खेती": "farming",
    "फसल": "crop",
    "किसान": "farmer",
    "बारिश": "rain",
    "पानी": "water",
    "सिंचाई": "irrigation",
    "कीट": "pest",
    "रोग": "disease",
    "मिट्टी": "soil",
    "खाद": "fertilizer",
    "बीज": "seed",
    "हंगाम": "season",
    # Marathi
    "गहू": "wheat",
    "भात": "rice/paddy",
    "कांदा": "onion",
    "बटाटा": "potato",
    "बाजार": "market",
    "शेती": "farming",
    "पीक": "crop",
    "शेतकरी": "farmer",
    "पाऊस": "rain",
    "माती": "soil",
    "कीड": "pest",
    "खत": "fertilizer",
    "बियाणे": "seed",
}

ENGLISH_TO_HINDI: dict[str, str] = {
    "wheat": "गेहूं",
    "rice": "धान",
    "paddy": "धान",
    "tomato": "टमाटर",
    "onion": "प्याज",
    "potato": "आलू",
    "market": "मंडी",
    "mandi": "मंडी",
    "price": "भाव/दाम",
    "farming": "खेती",
    "crop": "फसल",
    "farmer": "किसान",
    "rain": "बारिश",
    "water": "पानी",
    "irrigation": "सिंचाई",
    "pest": "कीट",
    "disease": "रोग",
    "soil": "मिट्टी",
    "fertilizer": "खाद",
    "seed": "बीज",
    "season": "मौसम",
}

_ENGLISH_TERM_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b{re.escape(english)}\b", flags=re.IGNORECASE), hindi)
    for english, hindi in ENGLISH_TO_HINDI.items()
]


def has_devanagari(text: str) -> bool:
    return any(DEVANAGARI_START <= ch <= DEVANAGARI_END for ch in text)


def detect_language(text: str) -> Language:
    """
    Classify text as English, Hindi or Marathi.

    No Devanagari -> English. Otherwise Marathi only when it has strictly more
    markers than Hindi; ties and unknown Devanagari text resolve to Hindi.
    """
    if not text or not has_devanagari(text):
        return Language.EN
    hindi_count = sum(1 for marker in HINDI_MARKERS if marker in text)
    marathi_count = sum(1 for marker in MARATHI_MARKERS if marker in text)
    logger.debug(
        "[language:detect] hindi_markers=%d marathi_markers=%d", hindi_count, marathi_count
    )
    if marathi_count > hindi_count:
        return Language.MR
    return Language.HI


@dataclass
class AnnotatedQuery:
    """Query text with [term=english] hints plus the English keywords found."""

    text: str
    keywords: list[str] = field(default_factory=list)

    @property
    def retrieval_text(self) -> str:
        """Annotated text followed by the bare English keywords, for keyword retrieval."""
        if not self.keywords:
            return self.text
        return " ".join([self.text, *self.keywords])


def annotate_query(text: str, language: Language) -> AnnotatedQuery:
    """
    Append [term=english] hints for every known farming term in a Hindi/Marathi query.

    English text and unrecognized words pass through unchanged.
    """
    if language is Language.EN:
        return AnnotatedQuery(text=text)
    hints: list[str] = []
    keywords: list[str] = []
    for term, english in DEVANAGARI_TO_ENGLISH.items():
        if term in text:
            hints.append(f"[{term}={english}]")
            for word in english.split("/"):
                if word not in keywords:
                    keywords.append(word)
    annotated = " ".join([text, *hints]) if hints else text
    logger.info("[language:annotate_query] OUT hints=%d keywords=%s", len(hints), keywords)
    return AnnotatedQuery(text=annotated, keywords=keywords)


def translate_from_english(text: str, target: Language) -> str:
    """For Hindi/Marathi, follow known English farming terms with the Hindi term in parentheses."""
    if target is Language.EN:
        return text
    result = text
    for pattern, hindi in _ENGLISH_TERM_PATTERNS:
        result = pattern.sub(lambda m, h=hindi: f"{m.group(0)} ({h})", result)
    return result
