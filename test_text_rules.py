from utils.text_rules import (
    AI_PHRASE,
    CONTRACTION,
    GRAMMAR,
    STYLE,
    ai_marker_score,
    apply_matches,
    find_matches,
    rewrite,
    split_sentences,
)


def test_subject_verb_agreement_is_flagged():
    matches = find_matches("He go to school.")
    assert len(matches) == 1
    m = matches[0]
    assert (m.start, m.end) == (0, 5)
    assert m.original == "He go"
    assert m.replacement == "He goes"
    assert m.rule.category == GRAMMAR


def test_lowercase_pronoun_i():
    text = "Yesterday i went home, i.e. early."
    matches = find_matches(text, (GRAMMAR,))
    assert [m.original for m in matches] == ["i"]
    assert apply_matches(text, matches) == "Yesterday I went home, i.e. early."


def test_overlapping_matches_keep_the_longer_one():
    matches = find_matches("Sometimes i is tired.", (GRAMMAR,))
    assert len(matches) == 1
    assert matches[0].replacement == "I am"


def test_wordy_phrases_are_style_matches():
    matches = find_matches("We met in order to plan.", (STYLE,))
    assert [(m.original, m.replacement) for m in matches] == [("in order to", "to")]


def test_replacement_keeps_leading_capital():
    assert rewrite("Furthermore, it works.", (AI_PHRASE,)) == "Also, it works."


def test_apply_matches_right_to_left_keeps_offsets():
    text = "It is late and we are tired."
    assert rewrite(text, (CONTRACTION,)) == "It's late and we're tired."


def test_clean_text_has_no_matches():
    assert find_matches("The committee approved the budget.") == []


def test_split_sentences_spans_point_into_text():
    text = "First one.  Second one!   Third"
    spans = split_sentences(text)
    assert [s for _, _, s in spans] == ["First one.", "Second one!", "Third"]
    for start, end, sentence in spans:
        assert text[start:end] == sentence


def test_ai_marker_score_is_bounded():
    phrases = "Furthermore, in conclusion, moreover, subsequently, in summary. " * 30
    assert 0 <= ai_marker_score(phrases) <= 100
    assert ai_marker_score(phrases) > ai_marker_score("I think my dog is great.")
