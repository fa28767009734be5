"""
Text Rules
A single pattern table used for local grammar checks, AI-phrase detection
and the mock rewrites.
"""

import re
from typing import Iterable, List, NamedTuple, Pattern, Tuple

GRAMMAR = "grammar"
STYLE = "style"
AI_PHRASE = "ai"
CONTRACTION = "contraction"


class TextRule(NamedTuple):
    category: str
    pattern: Pattern
    replacement: str  # re template, may use \1 etc.
    description: str


class RuleMatch(NamedTuple):
    rule: TextRule
    start: int
    end: int
    original: str
    replacement: str


def _rule(category: str, pattern: str, replacement: str, description: str) -> TextRule:
    return TextRule(category, re.compile(pattern, re.IGNORECASE), replacement, description)


RULES: Tuple[TextRule, ...] = (
    # grammar
    TextRule(GRAMMAR, re.compile(r"(?<![\w.'])i(?=[\s',;:!?]|\.(?!\w)|$)"), "I",
             "The pronoun 'I' should always be capitalized."),
    _rule(GRAMMAR, r"\bI is\b", "I am", "Use 'am' with the pronoun 'I'."),
    _rule(GRAMMAR, r"\b(he|she|it) go\b", r"\1 goes", "Third-person singular subjects take 'goes'."),
    _rule(GRAMMAR, r"\b(he|she|it) have\b", r"\1 has", "Third-person singular subjects take 'has'."),
    _rule(GRAMMAR, r"\b(he|she|it) don't\b", r"\1 doesn't", "Third-person singular subjects take 'doesn't'."),
    _rule(GRAMMAR, r"\b(he|she|it) do\b(?! not)", r"\1 does", "Third-person singular subjects take 'does'."),
    _rule(GRAMMAR, r"\b(they|we|you) was\b", r"\1 were", "Plural subjects take 'were'."),
    _rule(GRAMMAR, r"\bteachers gives\b", "teachers give", "Plural subjects take the base form of the verb."),
    _rule(GRAMMAR, r"\bnobody help\b", "nobody helps", "'Nobody' is singular and takes 'helps'."),
    _rule(GRAMMAR, r"\bhomeworks\b", "homework", "'Homework' is uncountable and has no plural form."),
    _rule(GRAMMAR, r"\b(is|are) been\b", r"has been", "Use 'has been' or 'have been' instead."),
    _rule(GRAMMAR, r"\b(could|should|would|must) of\b", r"\1 have", "Use 'have' after modal verbs, not 'of'."),
    _rule(GRAMMAR, r"\ba (?=[aeio]\w)", "an ", "Use 'an' before words that start with a vowel sound."),
    _rule(GRAMMAR, r"\byour welcome\b", "you're welcome", "Use 'you're' (you are) here."),
    _rule(GRAMMAR, r"\balot\b", "a lot", "'A lot' is written as two words."),
    _rule(GRAMMAR, r"\b(\w+) \1\b", r"\1", "Repeated word."),
    # style
    _rule(STYLE, r"\bin order to\b", "to", "Wordy phrase; 'to' is enough."),
    _rule(STYLE, r"\bdue to the fact that\b", "because", "Wordy phrase; use 'because'."),
    _rule(STYLE, r"\bat this point in time\b", "now", "Wordy phrase; use 'now'."),
    _rule(STYLE, r"\bfor the purpose of\b", "for", "Wordy phrase; use 'for'."),
    _rule(STYLE, r"\bin spite of the fact that\b", "although", "Wordy phrase; use 'although'."),
    _rule(STYLE, r"\bwith reference to\b", "regarding", "Wordy phrase; use 'regarding'."),
    _rule(STYLE, r"\bit is worth noting that\b", "notably", "Wordy phrase; use 'notably'."),
    # phrases typical of model output
    _rule(AI_PHRASE, r"\bas an AI language model\b", "in my view", "Self-reference typical of AI assistants."),
    _rule(AI_PHRASE, r"\bin conclusion\b", "to wrap up", "Formulaic conclusion common in AI writing."),
    _rule(AI_PHRASE, r"\bfurthermore\b", "also", "Formal connector overused by AI models."),
    _rule(AI_PHRASE, r"\bmoreover\b", "plus", "Formal connector overused by AI models."),
    _rule(AI_PHRASE, r"\bon the other hand\b", "but then again", "Stock contrast phrase common in AI writing."),
    _rule(AI_PHRASE, r"\bit is worth noting\b", "interestingly", "Hedging phrase common in AI writing."),
    _rule(AI_PHRASE, r"\bsubsequently\b", "after that", "Formal connector overused by AI models."),
    _rule(AI_PHRASE, r"\bin summary\b", "to sum it up", "Formulaic summary common in AI writing."),
    _rule(AI_PHRASE, r"\bdelve into\b", "dig into", "Word choice strongly associated with AI models."),
    _rule(AI_PHRASE, r"\bin today's fast-paced world\b", "these days", "Cliche opener common in AI writing."),
    # contractions used when humanizing
    _rule(CONTRACTION, r"\bit is\b", "it's", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bcannot\b", "can't", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bdo not\b", "don't", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bdoes not\b", "doesn't", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bwill not\b", "won't", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bI am\b", "I'm", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bwe are\b", "we're", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\bthey are\b", "they're", "Contraction sounds more natural."),
    _rule(CONTRACTION, r"\btherefore\b", "so", "Plainer connector sounds more natural."),
)

SENTENCE_RE = re.compile(r"[^.!?]+[.!?]*")


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper() and replacement[:1].islower():
        return replacement[0].upper() + replacement[1:]
    return replacement


def find_matches(text: str, categories: Iterable[str] = (GRAMMAR, STYLE)) -> List[RuleMatch]:
    """Run every rule of the given categories over ``text``.

    Overlapping matches are dropped so the result can be applied in one pass;
    the earlier (then longer) match wins.
    """
    wanted = set(categories)
    found: List[RuleMatch] = []
    for rule in RULES:
        if rule.category not in wanted:
            continue
        for m in rule.pattern.finditer(text):
            if m.start() == m.end():
                continue
            replacement = _match_case(m.group(0), m.expand(rule.replacement))
            found.append(RuleMatch(rule, m.start(), m.end(), m.group(0), replacement))

    found.sort(key=lambda rm: (rm.start, -(rm.end - rm.start)))
    result: List[RuleMatch] = []
    last_end = -1
    for rm in found:
        if rm.start >= last_end:
            result.append(rm)
            last_end = rm.end
    return result


def apply_matches(text: str, matches: Iterable[RuleMatch]) -> str:
    """Apply non-overlapping matches, right to left so offsets stay valid."""
    for rm in sorted(matches, key=lambda rm: rm.start, reverse=True):
        text = text[:rm.start] + rm.replacement + text[rm.end:]
    return text


def rewrite(text: str, categories: Iterable[str]) -> str:
    return apply_matches(text, find_matches(text, categories))


def split_sentences(text: str) -> List[Tuple[int, int, str]]:
    """Return ``(start, end, sentence)`` spans, whitespace trimmed."""
    spans = []
    for m in SENTENCE_RE.finditer(text):
        raw = m.group(0)
        stripped = raw.strip()
        if not stripped:
            continue
        start = m.start() + (len(raw) - len(raw.lstrip()))
        spans.append((start, start + len(stripped), stripped))
    return spans


def ai_marker_score(text: str) -> int:
    """Rough 0-100 score of how "machine-like" a text reads."""
    score = 5 * len(find_matches(text, (AI_PHRASE,)))

    sentences = split_sentences(text)
    if sentences:
        avg_len = sum(len(s) for _, _, s in sentences) / len(sentences)
        if avg_len > 150:
            score += 20
        elif avg_len > 120:
            score += 15
        elif avg_len > 100:
            score += 10

    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    if len(paragraphs) >= 3:
        lengths = [len(p) for p in paragraphs]
        mean = sum(lengths) / len(lengths)
        if all(abs(n - mean) < 0.2 * mean for n in lengths):
            score += 15

    words = re.findall(r"[a-z']+", text.lower())
    if words:
        personal = sum(1 for w in words if w in ("i", "me", "my", "i'm", "i've"))
        if personal / len(words) < 0.005:
            score += 10

    return max(0, min(100, score))
