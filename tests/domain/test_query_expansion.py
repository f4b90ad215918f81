import pytest

from sop_assistant.domain.services.query_expansion import QueryExpander, expand_query


def test_original_question_comes_first_followed_by_synonym_variants():
    variants = expand_query("How do I cancel a SIP?")

    assert variants == [
        "How do I cancel a SIP?",
        "How do I cancel a systematic investment plan?",
        "How do I stop a SIP?",
        "How do I terminate a SIP?",
    ]


def test_expansion_is_bounded_to_five():
    question = "How do I check status of a SIP refund after KYC update on the upload screen?"
    variants = expand_query(question)

    assert variants[0] == question
    assert len(variants) == 5
    assert len(set(variants)) == len(variants)


def test_no_match_returns_only_the_question():
    assert expand_query("Where is the office?") == ["Where is the office?"]


def test_substitution_is_case_insensitive_and_replaces_all_occurrences():
    expander = QueryExpander({"nav": ["net asset value"]})
    assert expander.expand("NAV vs nav")[1] == "net asset value vs net asset value"


def test_reload_swaps_table():
    expander = QueryExpander({"foo": ["bar"]})
    assert expander.expand("foo?") == ["foo?", "bar?"]

    expander.reload({"baz": ["qux"]})
    assert expander.expand("foo?") == ["foo?"]


def test_max_variants_must_be_positive():
    with pytest.raises(ValueError):
        QueryExpander(max_variants=0)
