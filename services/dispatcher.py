"""Mode dispatcher: routes writing-tool requests to providers with fallbacks.

Fallback order per mode:
    grammar   LanguageTool (+ local rules) -> generative model -> mock
    aicheck   ZeroGPT -> generative model -> mock
    others    generative model (Gemini -> Perplexity -> Cloudflare) -> mock
"""
import logging
from typing import Dict, Iterator, List, Optional

from core.config import Settings
from core.exceptions import ProviderError
from llm.base import GenerativeProvider, ProviderChain
from llm.cloudflare_client import CloudflareLlamaClient
from llm.gemini_client import GeminiClient
from llm.languagetool_client import LanguageToolClient
from llm.perplexity_client import PerplexityClient
from llm.zerogpt_client import ZeroGPTClient
from schemas.ai import AIRequest, GenerateWritingRequest
from schemas.results import (
    AICheckResult,
    GenerateWritingResult,
    GrammarError,
    GrammarResult,
    HumanizedResult,
    Metrics,
    ParaphraseResult,
    Suggestion,
    build_grammar_result,
)
from services.ai import WritingAssistant, WritingTools, local_findings
from services.mock import MockGenerator
from utils.chat_helpers import quick_reply

logger = logging.getLogger("ModeDispatcher")


def _overlaps(err: GrammarError, taken: List[GrammarError]) -> bool:
    return any(
        err.position.start < t.position.end and t.position.start < err.position.end
        for t in taken
    )


def merge_grammar_results(
    text: str,
    results: List[GrammarResult],
    extra_errors: List[GrammarError],
    extra_suggestions: List[Suggestion],
    metrics: Optional[Metrics] = None,
) -> GrammarResult:
    """Combine several checks of the same text; earlier results win on overlapping spans.

    Without ``metrics`` the scores are recomputed from the merged findings.
    """
    errors: List[GrammarError] = []
    for err in [e for r in results for e in r.errors] + extra_errors:
        if not _overlaps(err, errors):
            errors.append(err)

    suggestions: List[Suggestion] = []
    seen = set()
    for sug in [s for r in results for s in r.suggestions] + extra_suggestions:
        key = (sug.text.lower(), sug.replacement.lower())
        if key not in seen:
            seen.add(key)
            suggestions.append(sug)

    return build_grammar_result(text, errors, suggestions, metrics)


class ModeDispatcher:
    def __init__(
        self,
        assistant: Optional[WritingTools] = None,
        mock: Optional[MockGenerator] = None,
        grammar_checker: Optional[LanguageToolClient] = None,
        detector: Optional[ZeroGPTClient] = None,
        default_language: str = "en-US",
    ):
        self.assistant = assistant
        self.mock = mock or MockGenerator()
        self.grammar_checker = grammar_checker
        self.detector = detector
        self.default_language = default_language

    @property
    def tools(self) -> WritingTools:
        return self.assistant or self.mock

    def available_providers(self) -> Dict[str, Optional[str]]:
        return {
            "generative": self.assistant.name if self.assistant else None,
            "grammar": self.grammar_checker.name if self.grammar_checker else None,
            "detector": self.detector.name if self.detector else None,
        }

    def check_grammar(self, text: str, language: Optional[str] = None) -> GrammarResult:
        language = language or self.default_language
        rule_errors, rule_suggestions = local_findings(text)

        primary = None
        if self.grammar_checker:
            try:
                primary = self.grammar_checker.grammar_check(text, language)
            except ProviderError as e:
                logger.warning(f"Grammar checker failed: {e.message}")
            else:
                if primary.errors or primary.suggestions:
                    return merge_grammar_results(text, [primary], rule_errors, rule_suggestions)
                logger.info("Grammar checker found nothing; asking the generative model as well")

        fallback = None
        if self.assistant:
            try:
                fallback = self.assistant.grammar_check(text, language)
            except ProviderError as e:
                logger.warning(f"Generative grammar check failed: {e.message}")

        results = [r for r in (primary, fallback) if r is not None]
        if not results:
            logger.info("No grammar provider succeeded; using mock")
            return self.mock.grammar_check(text, language)
        # The model scores the text as a whole; LanguageTool reports no scores.
        metrics = fallback.metrics if fallback is not None else None
        return merge_grammar_results(text, results, rule_errors, rule_suggestions, metrics)

    def paraphrase(self, text: str, style: str = "standard", custom_tone: Optional[str] = None) -> ParaphraseResult:
        return self.tools.paraphrase(text, style, custom_tone)

    def humanize(self, text: str, style: str = "standard", custom_tone: Optional[str] = None) -> HumanizedResult:
        return self.tools.humanize(text, style, custom_tone)

    def check_ai(self, text: str) -> AICheckResult:
        if self.detector:
            try:
                return self.detector.detect_ai(text)
            except ProviderError as e:
                logger.warning(f"AI detector failed: {e.message}")
        if self.assistant:
            try:
                return self.assistant.detect_ai(text)
            except ProviderError as e:
                logger.warning(f"Generative AI check failed: {e.message}")
        logger.info("No AI-check provider succeeded; using mock")
        return self.mock.detect_ai(text)

    def generate_writing(self, request: GenerateWritingRequest) -> GenerateWritingResult:
        return self.tools.generate_writing(request)

    def chat(self, messages: List[Dict]) -> str:
        canned = quick_reply(messages)
        if canned:
            return canned
        return self.tools.chat(messages)

    def stream_chat(self, messages: List[Dict]) -> Iterator[str]:
        canned = quick_reply(messages)
        if canned:
            yield canned
            return
        yield from self.tools.stream_chat(messages)

    def process(self, request: AIRequest):
        """Run a non-streaming AIRequest and return its result model (chat returns the reply text)."""
        if request.mode == "grammar":
            return self.check_grammar(request.text, request.language)
        if request.mode == "paraphrase":
            return self.paraphrase(request.text, request.style, request.customTone)
        if request.mode == "humanize":
            return self.humanize(request.text, request.style, request.customTone)
        if request.mode == "aicheck":
            return self.check_ai(request.text)
        if request.mode == "chat":
            return self.chat([m.model_dump() for m in request.messages])
        raise ValueError(f"Unsupported mode: {request.mode}")


def build_dispatcher(settings: Settings) -> ModeDispatcher:
    """Pick providers from the configured credentials. Called once at startup."""
    timeout = settings.provider_timeout_seconds

    generators: List[GenerativeProvider] = []
    if settings.gemini_api_key:
        generators.append(GeminiClient(settings.gemini_api_key, settings.gemini_model, timeout))
    if settings.perplexity_api_key:
        generators.append(PerplexityClient(
            settings.perplexity_api_key, settings.perplexity_model, settings.perplexity_base_url, timeout
        ))
    if settings.cloudflare_configured:
        generators.append(CloudflareLlamaClient(
            settings.cloudflare_account_id, settings.cloudflare_api_token, settings.cloudflare_model, timeout
        ))

    assistant = None
    if generators:
        provider = generators[0] if len(generators) == 1 else ProviderChain(generators)
        assistant = WritingAssistant(provider)

    grammar_checker = LanguageToolClient(settings.languagetool_url, timeout) if settings.languagetool_url else None
    detector = (
        ZeroGPTClient(settings.zerogpt_api_key, settings.zerogpt_url, timeout) if settings.zerogpt_api_key else None
    )

    dispatcher = ModeDispatcher(
        assistant=assistant,
        grammar_checker=grammar_checker,
        detector=detector,
        default_language=settings.default_language,
    )
    logger.info(f"Providers: {dispatcher.available_providers()}")
    if not generators:
        logger.warning("No generative model credentials configured; paraphrase, humanize and chat use mock results")
    if not settings.session_secret:
        logger.warning("SESSION_SECRET is not set")
    return dispatcher
