from utils.parse_helpers import extract_json_object, extract_percentage, extract_string_field


def test_plain_json():
    assert extract_json_object('{"a": 1}') == {"a": 1}


def test_fenced_json():
    reply = 'Here you go:\n```json\n{"paraphrased": "Hi there"}\n```\nThanks'
    assert extract_json_object(reply) == {"paraphrased": "Hi there"}


def test_json_inside_prose_with_braces_in_strings():
    reply = 'Sure! {"text": "a } tricky { value", "n": 2} Hope that helps {not json}'
    assert extract_json_object(reply) == {"text": "a } tricky { value", "n": 2}


def test_non_object_json_is_rejected():
    assert extract_json_object("[1, 2, 3]") is None
    assert extract_json_object("no json here") is None
    assert extract_json_object("") is None


def test_string_field_from_broken_json():
    reply = '{"humanized": "It\'s \\"fine\\" now", "metrics": {'
    assert extract_string_field(reply, "humanized") == 'It\'s "fine" now'
    assert extract_string_field(reply, "paraphrased") is None


def test_percentage_fallbacks():
    assert extract_percentage('"aiPercentage": 82, broken') == 82
    assert extract_percentage("I'd say roughly 64% likely") == 64
    assert extract_percentage("no idea") == 50
    assert extract_percentage("250%") == 100
