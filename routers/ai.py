import json
import logging
from datetime import datetime, timezone
from typing import Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from core.deps import get_dispatcher
from core.exceptions import ProviderError
from schemas.ai import AIRequest, GenerateWritingRequest, GrammarCheckRequest, StyledTextRequest, TextRequest
from schemas.results import (
    AICheckResult,
    ChatReply,
    GenerateWritingResult,
    GrammarResult,
    HumanizedResult,
    ParaphraseResult,
)
from services.dispatcher import ModeDispatcher

router = APIRouter()
logger = logging.getLogger("AIRouter")

NDJSON = "application/x-ndjson"


def ndjson_chunks(chunks: Iterator[str]) -> Iterator[str]:
    """Wrap text chunks as ``{"response": ...}`` lines.

    A provider failure after the response has started is reported as a final
    error line, since the status code is already sent.
    """
    try:
        for chunk in chunks:
            yield json.dumps({"response": chunk}) + "\n"
    except ProviderError as e:
        logger.error(f"Chat stream failed: {e}")
        yield json.dumps({"error": "Chat response failed", "message": e.message}) + "\n"


@router.post("/grammar-check", response_model=GrammarResult)
def grammar_check(request: GrammarCheckRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    logger.info(f"Grammar check requested ({len(request.text)} chars)")
    return dispatcher.check_grammar(request.text, request.language)


@router.post("/paraphrase", response_model=ParaphraseResult)
def paraphrase(request: StyledTextRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    logger.info(f"Paraphrase requested (style={request.style})")
    return dispatcher.paraphrase(request.text, request.style, request.customTone)


@router.post("/humanize", response_model=HumanizedResult)
def humanize(request: StyledTextRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    logger.info(f"Humanize requested (style={request.style})")
    return dispatcher.humanize(request.text, request.style, request.customTone)


@router.post("/ai-check", response_model=AICheckResult)
def ai_check(request: TextRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    logger.info(f"AI check requested ({len(request.text)} chars)")
    return dispatcher.check_ai(request.text)


@router.post("/generate-writing", response_model=GenerateWritingResult)
def generate_writing(request: GenerateWritingRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    logger.info("Writing generation requested")
    return dispatcher.generate_writing(request)


@router.post("/ai/process")
def process(request: AIRequest, dispatcher: ModeDispatcher = Depends(get_dispatcher)):
    """Unified endpoint: one body shape for every mode. Chat can stream ND-JSON."""
    logger.info(f"Processing mode '{request.mode}'")
    if request.mode == "chat":
        messages = [m.model_dump() for m in request.messages]
        if request.stream:
            return StreamingResponse(ndjson_chunks(dispatcher.stream_chat(messages)), media_type=NDJSON)
        return ChatReply(response=dispatcher.chat(messages), timestamp=datetime.now(timezone.utc))
    return dispatcher.process(request)
