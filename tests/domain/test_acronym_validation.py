from sop_assistant.domain.models import Acronym
from sop_assistant.domain.services.acronym_validation import (
    expand_unexpanded_acronyms,
    find_acronyms,
    validate_acronyms_in_response,
)

ACRONYMS = {
    "MICR": Acronym("MICR", "Magnetic Ink Character Recognition", "Banking"),
    "KYC": Acronym("KYC", "Know Your Customer"),
    "IT": Acronym("IT", "Income Tax"),
}


def test_wrong_expansion_is_corrected():
    result = validate_acronyms_in_response("Check the MICR (Machine Ink Code Reader) line.", ACRONYMS)

    assert result.text == "Check the MICR (Magnetic Ink Character Recognition) line."
    assert result.corrections == ['MICR: "Machine Ink Code Reader" -> "Magnetic Ink Character Recognition"']


def test_overlapping_expansion_is_left_alone():
    text = "Check the MICR (magnetic ink character recognition) line."
    result = validate_acronyms_in_response(text, ACRONYMS)

    assert result.text == text
    assert result.corrections == []


def test_multiple_corrections_do_not_shift_offsets():
    text = "KYC (Keep Your Cash) and MICR (Machine Code) done."
    result = validate_acronyms_in_response(text, ACRONYMS)

    assert result.text == (
        "KYC (Know Your Customer) and MICR (Magnetic Ink Character Recognition) done."
    )
    assert len(result.corrections) == 2


def test_first_bare_occurrence_is_expanded_once():
    out = expand_unexpanded_acronyms("Submit the KYC form. KYC is mandatory.", ACRONYMS)
    assert out == "Submit the KYC (Know Your Customer) form. KYC is mandatory."


def test_parenthesised_occurrence_is_left_alone():
    text = "KYC (Know Your Customer) is mandatory."
    assert expand_unexpanded_acronyms(text, ACRONYMS) == text


def test_bare_occurrence_after_a_parenthesised_one_is_expanded():
    out = expand_unexpanded_acronyms(
        "KYC (Know Your Customer) is checked before KYC renewal. KYC again.", ACRONYMS
    )
    assert out == (
        "KYC (Know Your Customer) is checked before KYC (Know Your Customer) renewal. KYC again."
    )


def test_blacklisted_words_are_never_touched():
    text = "IT (Information Technology) handles IT tickets."
    assert validate_acronyms_in_response(text, ACRONYMS).text == text
    assert expand_unexpanded_acronyms(text, ACRONYMS) == text


def test_find_acronyms_in_order_of_appearance():
    found = find_acronyms("Verify MICR then KYC then MICR again", ACRONYMS)
    assert [a.abbreviation for a in found] == ["MICR", "KYC"]
