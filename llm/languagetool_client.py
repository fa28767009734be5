"""LanguageTool HTTP API client (rule-based grammar and style checking)."""
import logging
from typing import Dict, List, Tuple

from pydantic import ValidationError

from core.exceptions import ProviderError
from llm.base import post_json
from schemas.results import GrammarError, GrammarResult, Position, Suggestion, build_grammar_result

logger = logging.getLogger("LanguageToolClient")

STYLE_CATEGORY_KEYWORDS = ("style", "redundancy", "clarity", "readability", "typography")


class LanguageToolClient:
    name = "languagetool"

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url
        self.timeout = timeout

    def _check_once(self, text: str, language: str) -> List[Dict]:
        data = post_json(
            self.name,
            self.url,
            self.timeout,
            data={"text": text, "language": language, "enabledOnly": "false"},
            headers={"Accept": "application/json"},
        )
        matches = data.get("matches")
        if not isinstance(matches, list):
            raise ProviderError(self.name, "response has no 'matches' list")
        return matches

    @staticmethod
    def _split(text: str, matches: List[Dict]) -> Tuple[List[GrammarError], List[Suggestion]]:
        errors: List[GrammarError] = []
        suggestions: List[Suggestion] = []
        for match in matches:
            if not isinstance(match, dict):
                continue
            try:
                offset = int(match["offset"])
                length = int(match["length"])
            except (KeyError, TypeError, ValueError):
                continue
            replacements = match.get("replacements")
            if not isinstance(replacements, list) or not replacements or not isinstance(replacements[0], dict):
                continue
            replacement = replacements[0].get("value")
            if not isinstance(replacement, str):
                continue
            original = text[offset:offset + length]
            rule = match.get("rule") if isinstance(match.get("rule"), dict) else {}
            rule_id = rule.get("id", "UNKNOWN")
            category = rule.get("category") if isinstance(rule.get("category"), dict) else {}
            category_key = f"{category.get('id', '')} {category.get('name', '')} {rule.get('issueType', '')}".lower()
            message = str(match.get("message") or "")
            issue_id = f"lt-{rule_id}-{offset}"

            if any(k in category_key for k in STYLE_CATEGORY_KEYWORDS):
                suggestions.append(Suggestion(
                    id=issue_id,
                    type="style",
                    text=original,
                    replacement=replacement,
                    description=message,
                ))
            else:
                errors.append(GrammarError(
                    id=issue_id,
                    type="spelling" if rule.get("issueType") == "misspelling" else "grammar",
                    errorText=original,
                    replacementText=replacement,
                    description=message,
                    position=Position(start=offset, end=offset + length),
                ))
        return errors, suggestions

    def _findings(self, text: str, language: str) -> Tuple[List[GrammarError], List[Suggestion]]:
        matches = self._check_once(text, language)
        try:
            return self._split(text, matches)
        except (AttributeError, TypeError, ValueError, ValidationError) as e:
            raise ProviderError(self.name, f"malformed response: {e}") from e

    def grammar_check(self, text: str, language: str = "en-US") -> GrammarResult:
        errors, suggestions = self._findings(text, language)
        result = build_grammar_result(text, errors, suggestions)

        # One more pass over the corrected text catches errors the first fixes exposed.
        if result.corrected != text:
            try:
                second_errors, _ = self._findings(result.corrected, language)
            except ProviderError as e:
                logger.warning(f"Re-check skipped: {e.message}")
            else:
                if second_errors:
                    recheck = build_grammar_result(result.corrected, second_errors, [])
                    result.corrected = recheck.corrected
        logger.info(f"LanguageTool found {len(result.errors)} errors, {len(result.suggestions)} suggestions")
        return result
