import json

from conftest import FakeGenerator
from llm import writing_prompts as prompts
from schemas.ai import GenerateWritingRequest
from services.ai import WritingAssistant, local_findings, parse_metrics

TEXT = "She have a apple and they was happy."


def test_grammar_reply_is_normalized():
    reply = json.dumps({
        "errors": [
            # wrong offsets: relocated by the error text
            {"id": "e1", "errorText": "She have", "replacementText": "She has", "position": {"start": 3, "end": 9}},
            {"errorText": "they was", "replacementText": "they were", "description": "agreement"},
            {"errorText": "not in text", "replacementText": "x"},
        ],
        "suggestions": [{"originalText": "happy", "suggestedText": "delighted"}],
        "metrics": {"correctness": 140, "clarity": "80", "engagement": None},
    })
    result = WritingAssistant(FakeGenerator(reply)).grammar_check(TEXT)

    assert [e.errorText for e in result.errors] == ["She have", "they was"]
    assert result.errors[0].position.start == 0
    assert result.corrected == "She has a apple and they were happy."
    assert len(result.highlights) == 2
    assert result.suggestions[0].replacement == "delighted"
    assert result.metrics.correctness == 100
    assert result.metrics.clarity == 80
    assert result.metrics.engagement == 70


def test_grammar_prompt_uses_low_temperature():
    generator = FakeGenerator('{"errors": [], "suggestions": []}')
    WritingAssistant(generator).grammar_check(TEXT, "en-GB")
    kind, system_prompt, prompt, temperature = generator.calls[0]
    assert kind == "complete"
    assert "en-GB" in system_prompt
    assert prompt == TEXT
    assert temperature == prompts.GRAMMAR_TEMPERATURE


def test_non_json_grammar_reply_gives_empty_result():
    result = WritingAssistant(FakeGenerator("Looks fine to me!")).grammar_check(TEXT)
    assert result.errors == []
    assert result.suggestions == []
    assert result.corrected == TEXT


def test_paraphrase_reply_variants():
    good = WritingAssistant(FakeGenerator('```json\n{"paraphrased": "New words", "metrics": {"correctness": 90}}\n```'))
    result = good.paraphrase(TEXT, "academic")
    assert result.paraphrased == "New words"
    assert result.metrics.correctness == 90

    broken = WritingAssistant(FakeGenerator('{"paraphrased": "Half done", "metrics": {"correct'))
    result = broken.paraphrase(TEXT)
    assert result.paraphrased == "Half done"
    assert result.metrics.clarity == 75

    raw = WritingAssistant(FakeGenerator("Just some rewritten prose."))
    result = raw.paraphrase(TEXT)
    assert result.paraphrased == "Just some rewritten prose."
    assert result.metrics.delivery == 50


def test_style_sets_temperature_and_custom_tone():
    generator = FakeGenerator('{"humanized": "hey"}')
    WritingAssistant(generator).humanize(TEXT, "custom", "pirate")
    _, system_prompt, _, temperature = generator.calls[0]
    assert "[CUSTOM TONE: PIRATE]" in system_prompt
    assert temperature == prompts.HUMANIZE_TEMPERATURES["custom"]


def test_detect_ai_parses_and_falls_back():
    reply = json.dumps({
        "aiPercentage": 83,
        "highlights": [{"id": "h1", "position": {"start": 0, "end": 8}, "message": "stiff"},
                       {"position": {"start": 5, "end": 999}}],
        "metrics": {"correctness": 80, "clarity": 75, "engagement": 65, "delivery": 70},
    })
    result = WritingAssistant(FakeGenerator(reply)).detect_ai(TEXT)
    assert result.aiPercentage == 83
    assert result.verdict == "AI-generated"
    assert len(result.highlights) == 1

    result = WritingAssistant(FakeGenerator("Probably 20% AI.")).detect_ai(TEXT)
    assert result.aiPercentage == 20
    assert result.verdict == "Human-written"


def test_generate_writing_prompt_contents():
    generator = FakeGenerator("  An essay.  ")
    request = GenerateWritingRequest(instructions="Remote work", sample="I write short.", length="short")
    result = WritingAssistant(generator).generate_writing(request)
    assert result.generatedText == "An essay."
    prompt = generator.calls[0][2]
    assert "Remote work" in prompt
    assert "I write short." in prompt
    assert "approximately 250 words" in prompt


def test_chat_sends_sanitized_turns():
    generator = FakeGenerator("Sure.")
    reply = WritingAssistant(generator).chat([
        {"role": "system", "content": "Be kind."},
        {"role": "user", "content": "Help"},
        {"role": "user", "content": "please"},
    ])
    assert reply == "Sure."
    kind, system_prompt, turns, _ = generator.calls[0]
    assert kind == "chat"
    assert system_prompt == "Be kind."
    assert turns == [{"role": "user", "content": "Help\n\nplease"}]


def test_local_findings_split_errors_and_suggestions():
    errors, suggestions = local_findings("He go home due to the fact that it rained.")
    assert [e.replacementText for e in errors] == ["He goes"]
    assert [s.replacement for s in suggestions] == ["because"]


def test_parse_metrics_defaults():
    assert parse_metrics(None).model_dump() == {"correctness": 70, "clarity": 70, "engagement": 70, "delivery": 70}


def test_detect_ai_coerces_field_types():
    reply = json.dumps({
        "aiPercentage": 61,
        "highlights": [{"start": 0, "end": 3, "message": {"why": "stiff"}}],
        "suggestions": [{"originalText": "She", "suggestedText": "He", "id": 7}],
    })
    result = WritingAssistant(FakeGenerator(reply)).detect_ai(TEXT)
    assert result.aiPercentage == 61
    assert result.highlights[0].message == "{'why': 'stiff'}"
    assert result.suggestions[0].id == "7"
