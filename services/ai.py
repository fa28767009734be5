"""AI service layer.

Prompt assembly for the writing tools and normalization of whatever the
model sends back into the result shapes in ``schemas.results``.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from llm import writing_prompts as prompts
from llm.base import GenerativeProvider
from schemas.ai import GenerateWritingRequest
from schemas.results import (
    AICheckResult,
    GenerateWritingResult,
    GrammarError,
    GrammarResult,
    Highlight,
    HumanizedResult,
    Metrics,
    ParaphraseResult,
    Position,
    Suggestion,
    ai_verdict,
    build_grammar_result,
    clamp_score,
)
from utils.chat_helpers import sanitize_messages
from utils.parse_helpers import extract_json_object, extract_percentage, extract_string_field
from utils.text_rules import GRAMMAR, STYLE, find_matches

logger = logging.getLogger("WritingAssistant")


class WritingTools(ABC):
    """Everything the dispatcher can ask of a generative backend."""

    name = "tools"

    @abstractmethod
    def grammar_check(self, text: str, language: str = "en-US") -> GrammarResult: ...

    @abstractmethod
    def paraphrase(self, text: str, style: str = "standard", custom_tone: Optional[str] = None) -> ParaphraseResult: ...

    @abstractmethod
    def humanize(self, text: str, style: str = "standard", custom_tone: Optional[str] = None) -> HumanizedResult: ...

    @abstractmethod
    def detect_ai(self, text: str) -> AICheckResult: ...

    @abstractmethod
    def generate_writing(self, request: GenerateWritingRequest) -> GenerateWritingResult: ...

    @abstractmethod
    def chat(self, messages: List[Dict]) -> str: ...

    @abstractmethod
    def stream_chat(self, messages: List[Dict]) -> Iterator[str]: ...


def local_findings(text: str) -> Tuple[List[GrammarError], List[Suggestion]]:
    """Turn rule-table matches into grammar errors and style suggestions."""
    errors: List[GrammarError] = []
    suggestions: List[Suggestion] = []
    for m in find_matches(text, (GRAMMAR, STYLE)):
        if m.rule.category == GRAMMAR:
            errors.append(GrammarError(
                id=f"rule-{m.start}",
                type="grammar",
                errorText=m.original,
                replacementText=m.replacement,
                description=m.rule.description,
                position=Position(start=m.start, end=m.end),
            ))
        else:
            suggestions.append(Suggestion(
                id=f"rule-{m.start}",
                type="style",
                text=m.original,
                replacement=m.replacement,
                description=m.rule.description,
            ))
    return errors, suggestions


def parse_metrics(raw: Any, default: int = 70) -> Metrics:
    raw = raw if isinstance(raw, dict) else {}
    return Metrics(**{
        key: clamp_score(raw.get(key), default=default)
        for key in ("correctness", "clarity", "engagement", "delivery")
    })


def _locate(text: str, snippet: str, hint: Optional[int] = None) -> Optional[Tuple[int, int]]:
    if not snippet:
        return None
    if hint is not None and text[hint:hint + len(snippet)] == snippet:
        return hint, hint + len(snippet)
    idx = text.find(snippet)
    if idx == -1:
        return None
    return idx, idx + len(snippet)


def _position(raw: Any) -> Tuple[Optional[int], Optional[int]]:
    if not isinstance(raw, dict):
        return None, None
    try:
        return int(raw["start"]), int(raw["end"])
    except (KeyError, TypeError, ValueError):
        return None, None


def parse_grammar_errors(raw_errors: Any, text: str) -> List[GrammarError]:
    """Keep errors whose span can be tied to ``text``; models often miscount offsets."""
    errors = []
    for i, raw in enumerate(raw_errors if isinstance(raw_errors, list) else []):
        if not isinstance(raw, dict):
            continue
        error_text = str(raw.get("errorText") or "")
        replacement = raw.get("replacementText")
        if replacement is None:
            continue
        start, end = _position(raw.get("position"))
        if error_text:
            span = _locate(text, error_text, start)
        elif start is not None and end is not None and 0 <= start < end <= len(text):
            span = (start, end)
            error_text = text[start:end]
        else:
            span = None
        if span is None:
            continue
        errors.append(GrammarError(
            id=str(raw.get("id") or f"error-{i + 1}"),
            type=str(raw.get("type") or "grammar"),
            errorText=error_text,
            replacementText=str(replacement),
            description=str(raw.get("description") or ""),
            position=Position(start=span[0], end=span[1]),
        ))
    return errors


def parse_suggestions(raw_suggestions: Any, kind: str = "style") -> List[Suggestion]:
    suggestions = []
    for i, raw in enumerate(raw_suggestions if isinstance(raw_suggestions, list) else []):
        if not isinstance(raw, dict):
            continue
        original = raw.get("originalText", raw.get("text"))
        replacement = raw.get("suggestedText", raw.get("replacement"))
        if not original or replacement is None:
            continue
        suggestions.append(Suggestion(
            id=str(raw.get("id") or f"suggestion-{i + 1}"),
            type=str(raw.get("type") or kind),
            text=str(original),
            replacement=str(replacement),
            description=str(raw.get("description") or ""),
        ))
    return suggestions


def parse_highlights(raw_highlights: Any, text: str, kind: str = "ai") -> List[Highlight]:
    highlights = []
    for raw in raw_highlights if isinstance(raw_highlights, list) else []:
        if not isinstance(raw, dict):
            continue
        start, end = _position(raw.get("position"))
        if start is None:
            start, end = _position(raw)
        if start is None or not (0 <= start < end <= len(text)):
            continue
        highlights.append(Highlight(
            type=str(raw.get("type") or kind),
            start=start,
            end=end,
            message=str(raw["message"]) if raw.get("message") is not None else None,
        ))
    return highlights


class WritingAssistant(WritingTools):
    """Writing tools backed by a generative model."""

    def __init__(self, provider: GenerativeProvider):
        self.provider = provider
        self.name = provider.name

    def grammar_check(self, text, language="en-US"):
        reply = self.provider.complete(prompts.grammar_prompt(language), text, prompts.GRAMMAR_TEMPERATURE, 2048)
        data = extract_json_object(reply)
        if data is None:
            logger.warning("Grammar reply was not JSON; returning an empty result")
            return build_grammar_result(text, [], [])

        try:
            errors = parse_grammar_errors(data.get("errors"), text)
            suggestions = parse_suggestions(data.get("suggestions"))
            metrics = parse_metrics(data.get("metrics")) if isinstance(data.get("metrics"), dict) else None
        except ValidationError as e:
            logger.warning(f"Grammar reply had an unusable shape; returning an empty result: {e}")
            return build_grammar_result(text, [], [])
        return build_grammar_result(text, errors, suggestions, metrics)

    def _rewrite(self, system_prompt: str, text: str, temperature: float, field: str) -> Tuple[str, Metrics]:
        reply = self.provider.complete(system_prompt, text, temperature, 2048)
        data = extract_json_object(reply)
        if data and isinstance(data.get(field), str) and data[field].strip():
            return data[field], parse_metrics(data.get("metrics"))

        extracted = extract_string_field(reply, field)
        if extracted:
            logger.warning(f"Recovered '{field}' from malformed JSON")
            return extracted, parse_metrics(None, default=75)

        logger.warning(f"No '{field}' in reply; using raw text")
        return reply.strip(), parse_metrics(None, default=50)

    def paraphrase(self, text, style="standard", custom_tone=None):
        paraphrased, metrics = self._rewrite(
            prompts.paraphrase_prompt(style, custom_tone),
            text,
            prompts.PARAPHRASE_TEMPERATURES.get(style, 0.7),
            "paraphrased",
        )
        return ParaphraseResult(paraphrased=paraphrased, metrics=metrics)

    def humanize(self, text, style="standard", custom_tone=None):
        humanized, metrics = self._rewrite(
            prompts.humanize_prompt(style, custom_tone),
            text,
            prompts.HUMANIZE_TEMPERATURES.get(style, 0.85),
            "humanized",
        )
        return HumanizedResult(humanized=humanized, metrics=metrics)

    def detect_ai(self, text):
        reply = self.provider.complete(prompts.ai_detection_prompt(), text, prompts.AI_DETECTION_TEMPERATURE, 1500)
        data = extract_json_object(reply)
        if data is None:
            percentage = extract_percentage(reply)
            return AICheckResult(
                aiPercentage=percentage,
                verdict=ai_verdict(percentage),
                metrics=parse_metrics(None),
            )

        percentage = clamp_score(data.get("aiPercentage"), default=50)
        try:
            highlights = parse_highlights(data.get("highlights"), text)
            suggestions = parse_suggestions(data.get("suggestions"), kind="ai")
        except ValidationError as e:
            logger.warning(f"AI-check reply had unusable highlights; dropping them: {e}")
            highlights, suggestions = [], []
        return AICheckResult(
            aiPercentage=percentage,
            verdict=ai_verdict(percentage),
            highlights=highlights,
            suggestions=suggestions,
            metrics=parse_metrics(data.get("metrics")),
        )

    def generate_writing(self, request):
        prompt = prompts.generate_writing_prompt(
            request.instructions,
            sample=request.sample,
            references=request.references,
            length=request.length,
            style=request.style,
            extra=request.format,
        )
        text = self.provider.complete(
            prompts.system_instruction("content_writer"), prompt, prompts.WRITING_TEMPERATURE, 2048
        )
        return GenerateWritingResult(generatedText=text.strip())

    def chat(self, messages):
        system_prompt, turns = sanitize_messages(messages)
        return self.provider.chat(system_prompt, turns, prompts.CHAT_TEMPERATURE, prompts.CHAT_MAX_TOKENS)

    def stream_chat(self, messages):
        system_prompt, turns = sanitize_messages(messages)
        yield from self.provider.stream_chat(system_prompt, turns, prompts.CHAT_TEMPERATURE, prompts.CHAT_MAX_TOKENS)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
