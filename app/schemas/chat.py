"""Schemas for the chat and translate endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /chat. Blank queries are rejected with 400, not 422."""

    query: str = Field("", description="Farmer's question in English, Hindi or Marathi.")
    language: str | None = Field(None, description="Reply language code (en, hi, mr). Defaults to the detected language.")
    image: str | None = Field(None, description="Optional crop photo as a base64 string or data URL.")


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    answer: str = Field(..., description="Model answer, or a fallback answer when the model is unavailable.")
    sources: list[str] = Field(default_factory=list, description="Knowledge-base sources used to ground the answer.")
    confidence: Literal["low", "medium", "high"] = Field(..., description="Derived from the number of sources.")
    detected_language: str = Field(..., description="Language detected from the query (en, hi, mr).")

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "answer": "Wheat is best sown in October to November...",
                "sources": ["ICAR Wheat Guidelines", "IMD Advisory"],
                "confidence": "medium",
                "detected_language": "en",
            }]
        }
    }


class TranslateRequest(BaseModel):
    """Request body for POST /translate."""

    text: str = Field("", description="Text to translate.")
    target_lang: str = Field("en", description="Target language code (en, hi, mr).")


class TranslateResponse(BaseModel):
    """Response for POST /translate."""

    translated_text: str


class ErrorResponse(BaseModel):
    """Error body for 4xx/5xx responses."""

    error: str
