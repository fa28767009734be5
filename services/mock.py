"""Offline writing tools used when no provider credentials are configured.

Scores are random within fixed bounds; rewrites come from the rule table and
simple word maps. Results only need the right shape, so every method returns
a well-formed object and never raises.
"""
import random
import re
from typing import Iterator, Optional

from schemas.results import (
    AICheckResult,
    GenerateWritingResult,
    Highlight,
    HumanizedResult,
    Metrics,
    ParaphraseResult,
    Suggestion,
    ai_verdict,
    build_grammar_result,
)
from services.ai import WritingTools, local_findings, new_id
from utils.chat_helpers import GREETING_REPLY, quick_reply
from utils.text_rules import AI_PHRASE, CONTRACTION, ai_marker_score, find_matches, rewrite, split_sentences

STYLE_WORDS = {
    "standard": ["also", "likewise", "additionally", "furthermore", "moreover"],
    "fluency": ["smoothly", "expertly", "effortlessly", "gracefully", "seamlessly"],
    "formal": ["therefore", "subsequently", "consequently", "hence", "thus"],
    "academic": ["aforementioned", "significant", "empirical", "theoretical", "fundamental"],
    "custom": ["uniquely", "specifically", "particularly", "especially", "notably"],
}
# Words swapped for the style words above, in the same order.
SWAPPED_WORDS = ["also", "as well", "in addition", "furthermore", "moreover"]

LONG_SENTENCE = 150


class MockGenerator(WritingTools):
    name = "mock"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _metrics(self, low: int = 65, high: int = 90) -> Metrics:
        return Metrics(
            correctness=self.rng.randint(low, high),
            clarity=self.rng.randint(low, high),
            engagement=self.rng.randint(low, high),
            delivery=self.rng.randint(low, high),
        )

    def grammar_check(self, text, language="en-US"):
        errors, suggestions = local_findings(text)
        return build_grammar_result(text, errors, suggestions)

    def paraphrase(self, text, style="standard", custom_tone=None):
        words = STYLE_WORDS.get(style, STYLE_WORDS["standard"])
        paraphrased = text
        for original, replacement in zip(SWAPPED_WORDS, words):
            if original != replacement:
                paraphrased = re.sub(rf"\b{re.escape(original)}\b", replacement, paraphrased, flags=re.IGNORECASE)

        # Move the second half of every other sentence to the front.
        sentences = paraphrased.split(". ")
        for i in range(1, len(sentences), 2):
            parts = sentences[i].split(" ")
            if len(parts) > 3:
                half = len(parts) // 2
                sentences[i] = " ".join(parts[half:] + parts[:half])
        return ParaphraseResult(paraphrased=". ".join(sentences), metrics=self._metrics())

    def humanize(self, text, style="standard", custom_tone=None):
        humanized = rewrite(text, (AI_PHRASE, CONTRACTION))
        sentences = humanized.split(". ")
        for i in range(1, len(sentences)):
            if sentences[i] and self.rng.random() < 0.3:
                sentences[i] = "Honestly, " + sentences[i][0].lower() + sentences[i][1:]
        return HumanizedResult(humanized=". ".join(sentences), metrics=self._metrics(70, 92))

    def detect_ai(self, text):
        percentage = max(25, min(99, ai_marker_score(text) + self.rng.randint(25, 60)))

        highlights = []
        suggestions = []
        for m in find_matches(text, (AI_PHRASE,)):
            highlights.append(Highlight(
                type="ai",
                start=m.start,
                end=m.end,
                message=f'The phrase "{m.original}" is commonly used by AI models',
            ))
            suggestions.append(Suggestion(
                id=new_id("ai"),
                type="ai",
                text=m.original,
                replacement=m.replacement,
                description="This phrase is common in AI-generated content. Consider a more conversational alternative.",
            ))

        for start, end, sentence in split_sentences(text):
            if len(sentence) > LONG_SENTENCE:
                highlights.append(Highlight(
                    type="ai",
                    start=start,
                    end=end,
                    message="Long, complex sentences are a common pattern in AI writing",
                ))
                suggestions.append(Suggestion(
                    id=new_id("ai"),
                    type="ai",
                    text=sentence,
                    replacement="Break this into 2-3 shorter sentences for a more human touch.",
                    description="Human writers tend to use shorter sentences with varied structure.",
                ))

        return AICheckResult(
            aiPercentage=percentage,
            verdict=ai_verdict(percentage),
            highlights=highlights,
            suggestions=suggestions,
            metrics=Metrics(correctness=70, clarity=75, engagement=80, delivery=78),
        )

    def generate_writing(self, request):
        topic = request.instructions.strip().rstrip(".") or "This topic"
        paragraphs = [
            f"{topic[0].upper()}{topic[1:]} is a subject worth a closer look.",
            "There are a few angles to consider: where it came from, why it matters today, "
            "and what it could mean for the people it touches.",
            "Taken together, these points give a practical starting place. "
            "Add your own examples and experience to make the piece yours.",
        ]
        if request.sample:
            paragraphs.insert(1, "The tone here follows the sample you provided.")
        return GenerateWritingResult(generatedText="\n\n".join(paragraphs))

    def chat(self, messages):
        canned = quick_reply(messages)
        if canned:
            return canned
        last_user = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
        if not last_user.strip():
            return GREETING_REPLY
        excerpt = " ".join(last_user.split())[:80]
        return (
            f'You asked about: "{excerpt}". I\'m running in offline mode, so I can\'t give a full answer, '
            "but the grammar, paraphrase, humanize and AI-check tools all still work."
        )

    def stream_chat(self, messages) -> Iterator[str]:
        words = self.chat(messages).split(" ")
        for i, word in enumerate(words):
            yield word if i == len(words) - 1 else word + " "
