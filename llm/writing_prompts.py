from typing import Optional

from utils.chat_helpers import DEFAULT_SYSTEM_PROMPT

PARAPHRASE_TEMPERATURES = {"standard": 0.7, "fluency": 0.8, "academic": 0.5, "formal": 0.6, "custom": 0.9}
HUMANIZE_TEMPERATURES = {"standard": 0.85, "fluency": 0.92, "academic": 0.75, "formal": 0.8, "custom": 0.95}
GRAMMAR_TEMPERATURE = 0.2
AI_DETECTION_TEMPERATURE = 0.1
WRITING_TEMPERATURE = 0.7
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1200

METRICS_JSON = """"metrics": {
    "correctness": 85,
    "clarity": 70,
    "engagement": 80,
    "delivery": 75
  }"""

METRICS_GUIDELINES = """METRICS SCORING GUIDELINES:
- Correctness: how well the {noun} text preserves the original meaning (50-100)
- Clarity: how clear and understandable the {noun} text is (50-100)
- Engagement: how engaging and interesting the {noun} text is (50-100)
- Delivery: how well the {noun} text flows and sounds natural (50-100)
- Never return 0 for any category; the minimum is 50"""

JSON_ONLY = (
    "IMPORTANT: Respond with a raw, valid JSON object only. "
    "No markdown formatting, no code fences, no text outside the JSON object."
)

PARAPHRASE_STYLES = {
    "standard": 'Keep the original tone while rewording for clarity. Example: "This is important" -> "This matter is significant"',
    "formal": 'Use formal language with careful vocabulary and structure. Example: "I think" -> "It is proposed that"',
    "fluency": 'Optimize for smooth, natural-sounding flow. Example: "The system processes data" -> "Data flows smoothly through the system"',
    "academic": 'Use terminology and structures suited to scholarly work. Example: "We found" -> "The findings indicate"',
    "custom": "Be more creative with rephrasing while preserving meaning. Follow the specified tone exactly.",
}

HUMANIZE_STYLES = {
    "standard": "Make the text sound genuinely human: natural speech patterns, contractions, occasional fragments, casual transitions and varied sentence structure.",
    "formal": "Add human touches while staying professional: vary sentence length, use an occasional first-person perspective and thoughtful transitions.",
    "fluency": "Make it conversational with casual transitions, contractions, parenthetical thoughts and natural flow.",
    "academic": "Add human elements like hedging and personal perspective while keeping academic integrity.",
    "custom": "Rewrite the text to sound authentically human in exactly the specified tone, with natural imperfections and idiomatic expressions.",
}

WRITING_LENGTHS = {
    "short": "approximately 250 words",
    "medium": "approximately 500 words",
    "long": "approximately 1000-1500 words",
}

WRITING_STYLES = {
    "formal": "Use formal language, proper terminology, and a professional tone.",
    "conversational": "Use a friendly, conversational tone with contractions and simpler sentences.",
    "academic": "Use academic vocabulary, complex sentence structures, and citations where appropriate.",
    "creative": "Use vivid descriptions, metaphors, and creative language.",
    "technical": "Use precise terminology, define concepts clearly, and keep a clear logical structure.",
}


def system_instruction(persona: str) -> str:
    instructions = {
        "writing_assistant": DEFAULT_SYSTEM_PROMPT,
        "content_writer": (
            "You are an expert content writer. Write high-quality, engaging, original content that "
            "fulfils every requested parameter. Reply with the writing only: no preamble, no explanations."
        ),
    }
    return instructions.get(persona.lower(), "You are a helpful assistant. Provide accurate and relevant information.")


def _style_header(style: str, custom_tone: Optional[str]) -> str:
    if style == "custom" and custom_tone:
        return f"[CUSTOM TONE: {custom_tone.upper()}]"
    return f"[STYLE: {style.upper()}]"


def grammar_prompt(language: str = "en-US") -> str:
    return f"""You are an expert proofreader for {language} text.
Find grammar, spelling and punctuation errors, and style improvements, in the text the user sends.
{JSON_ONLY}
Respond with ONLY this JSON format:
{{
  "errors": [
    {{
      "id": "error-1",
      "type": "grammar",
      "errorText": "exact text containing the error",
      "replacementText": "corrected text",
      "description": "short explanation",
      "position": {{"start": 0, "end": 5}}
    }}
  ],
  "suggestions": [
    {{
      "id": "suggestion-1",
      "type": "style",
      "originalText": "text that could be improved",
      "suggestedText": "improved text",
      "description": "why this reads better"
    }}
  ],
  {METRICS_JSON}
}}

Positions are zero-based character offsets into the user's text; "end" is exclusive.
errorText must be copied exactly from the text. Use empty lists when nothing is wrong."""


def paraphrase_prompt(style: str = "standard", custom_tone: Optional[str] = None) -> str:
    if style == "custom" and custom_tone:
        description = f"Use a {custom_tone} tone while preserving the meaning."
    else:
        description = PARAPHRASE_STYLES.get(style, PARAPHRASE_STYLES["standard"])

    return f"""You are an expert writing assistant specializing in paraphrasing.
{_style_header(style, custom_tone)}
Rewrite the provided text in a different way while preserving its original meaning.
Use the {custom_tone if style == "custom" and custom_tone else style} style.
Style description: {description}
{JSON_ONLY}
Respond with ONLY this JSON format:
{{
  "paraphrased": "The paraphrased text",
  {METRICS_JSON}
}}

{METRICS_GUIDELINES.format(noun="paraphrased")}"""


def humanize_prompt(style: str = "standard", custom_tone: Optional[str] = None) -> str:
    if style == "custom" and custom_tone:
        description = f"Use a {custom_tone} tone while making the text sound authentically human."
    else:
        description = HUMANIZE_STYLES.get(style, HUMANIZE_STYLES["standard"])

    return f"""You are an expert writing coach who makes text sound authentically human-written.
{_style_header(style, custom_tone)}

Rewrite the provided text so it reads as if a person wrote it:
1. Vary sentence length: mix short sentences with occasional long ones
2. Use contractions and informal transitions where they fit
3. Add personal touches and the occasional rhetorical question
4. Avoid formulaic connectors such as "furthermore", "moreover" and "in conclusion"
5. Keep every fact and the overall meaning of the original

Style specifics: {description}
{JSON_ONLY}
Respond with ONLY this JSON format:
{{
  "humanized": "The humanized text",
  {METRICS_JSON}
}}

{METRICS_GUIDELINES.format(noun="humanized")}"""


def ai_detection_prompt() -> str:
    return f"""You are an expert AI content detector. Decide whether the provided text was likely written by an AI model or a human.

Focus on:
1. Repetitive patterns or phrasing
2. Unnatural transitions or coherence issues
3. Overly formal or uniform tone
4. Lack of personal voice or anecdotes
5. Formulaic structure typical of AI responses
{JSON_ONLY}
Respond with ONLY this JSON format:
{{
  "aiPercentage": 75,
  "highlights": [
    {{
      "id": "highlight-1",
      "position": {{"start": 25, "end": 45}},
      "message": "This phrase has patterns common in AI writing"
    }}
  ],
  {METRICS_JSON}
}}

aiPercentage is 0-100; higher means more likely AI-generated.
Positions are zero-based character offsets into the text.
Metrics reflect overall writing quality regardless of authorship."""


def generate_writing_prompt(
    instructions: str,
    sample: Optional[str] = None,
    references: Optional[str] = None,
    length: Optional[str] = None,
    style: Optional[str] = None,
    extra: Optional[str] = None,
) -> str:
    length_text = WRITING_LENGTHS.get((length or "medium").lower(), length or WRITING_LENGTHS["medium"])
    style_text = WRITING_STYLES.get((style or "conversational").lower(), style or WRITING_STYLES["conversational"])

    parts = [f"Write content on the following topic: {instructions}"]
    if sample:
        parts.append(
            "Here is a sample of my writing. Mimic its word choice, sentence structure and tone:\n"
            f'"""\n{sample}\n"""'
        )
    if references:
        parts.append(f"Reference this source for factual information: {references}")
    parts.append(f"Length: {length_text}")
    parts.append(f"Style: {style_text}")
    if extra:
        parts.append(f"Additional instructions: {extra}")
    return "\n".join(parts)
