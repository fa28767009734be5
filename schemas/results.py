"""Provider-agnostic result shapes returned by the dispatcher."""
from datetime import datetime
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, Field


class Metrics(BaseModel):
    correctness: int = Field(default=70, ge=0, le=100)
    clarity: int = Field(default=70, ge=0, le=100)
    engagement: int = Field(default=70, ge=0, le=100)
    delivery: int = Field(default=70, ge=0, le=100)


class Position(BaseModel):
    start: int
    end: int


class Highlight(BaseModel):
    type: str
    start: int
    end: int
    suggestion: Optional[str] = None
    message: Optional[str] = None


class GrammarError(BaseModel):
    id: str
    type: str = "grammar"
    errorText: str
    replacementText: str
    description: str = ""
    position: Position


class Suggestion(BaseModel):
    id: str
    type: str
    text: str
    replacement: str
    description: str = ""


class GrammarResult(BaseModel):
    corrected: str
    errors: List[GrammarError] = Field(default_factory=list)
    highlights: List[Highlight] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)


class ParaphraseResult(BaseModel):
    paraphrased: str
    metrics: Metrics = Field(default_factory=Metrics)


class HumanizedResult(BaseModel):
    humanized: str
    metrics: Metrics = Field(default_factory=Metrics)


class AICheckResult(BaseModel):
    aiPercentage: int = Field(ge=0, le=100)
    verdict: str
    highlights: List[Highlight] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)


class GenerateWritingResult(BaseModel):
    generatedText: str


class ChatReply(BaseModel):
    response: str
    timestamp: datetime


def clamp_score(value: Any, default: Optional[int] = 70, low: int = 0, high: int = 100) -> Optional[int]:
    """Coerce a model-reported score into ``low..high``."""
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(low, min(high, score))


def grammar_metrics(error_count: int, suggestion_count: int) -> Metrics:
    correctness = clamp_score(100 - 5 * (error_count + suggestion_count), low=20, high=95)
    clarity = clamp_score(92 - 4 * suggestion_count - 2 * error_count, low=40, high=95)
    return Metrics(
        correctness=correctness,
        clarity=clarity,
        engagement=clamp_score((correctness + clarity) // 2, low=40, high=95),
        delivery=clamp_score(correctness - 3, low=40, high=95),
    )


def ai_verdict(ai_percentage: int) -> str:
    return "AI-generated" if ai_percentage >= 50 else "Human-written"


def build_grammar_result(
    text: str,
    errors: Sequence[GrammarError],
    suggestions: Sequence[Suggestion],
    metrics: Optional[Metrics] = None,
) -> GrammarResult:
    """Assemble a GrammarResult: corrected text and highlights are derived from ``errors``.

    Errors with out-of-range or overlapping spans are dropped.
    """
    kept: List[GrammarError] = []
    last_end = -1
    for err in sorted(errors, key=lambda e: (e.position.start, e.position.end)):
        start, end = err.position.start, err.position.end
        if start < 0 or end > len(text) or start >= end or start < last_end:
            continue
        kept.append(err)
        last_end = end

    corrected = text
    for err in reversed(kept):
        corrected = corrected[:err.position.start] + err.replacementText + corrected[err.position.end:]

    highlights = [
        Highlight(
            type="error",
            start=err.position.start,
            end=err.position.end,
            suggestion=err.replacementText,
            message=err.description or None,
        )
        for err in kept
    ]
    return GrammarResult(
        corrected=corrected,
        errors=kept,
        highlights=highlights,
        suggestions=list(suggestions),
        metrics=metrics or grammar_metrics(len(kept), len(suggestions)),
    )
