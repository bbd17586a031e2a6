import pytest

from newsagg.services.expander import QueryExpander, TermDictionary, get_term_dictionary


@pytest.fixture(scope="module")
def expander() -> QueryExpander:
    return QueryExpander(get_term_dictionary())


@pytest.mark.parametrize("raw", ["Jerusalem", "ירושלים", "Tel Aviv", "unknown words", "IDF"])
def test_expansion_contains_raw_and_lowercase(expander, raw) -> None:
    variants = expander.expand(raw)

    assert raw in variants
    assert raw.lower() in variants


def test_raw_is_trimmed(expander) -> None:
    assert expander.expand("  Gaza  ") == {"Gaza", "gaza", "עזה"}


def test_empty_query_has_no_variants(expander) -> None:
    assert expander.expand("   ") == set()


def test_hebrew_to_english(expander) -> None:
    assert "jerusalem" in expander.expand("ירושלים")
    assert {"maale adumim", "ma'ale adumim"} <= expander.expand("מעלה אדומים")


def test_english_to_hebrew_is_case_insensitive(expander) -> None:
    assert "ירושלים" in expander.expand("JERUSALEM")
    assert {"גדה מערבית", "יהודה ושומרון"} <= expander.expand("West Bank")


def test_compound_query_matches_single_words(expander) -> None:
    variants = expander.expand("ירושלים העתיקה")

    assert "jerusalem" in variants
    assert "ירושלים העתיקה" in variants

    assert {"ישראל", "עזה"} <= expander.expand("israel gaza talks")


def test_every_dictionary_mapping_expands() -> None:
    terms = get_term_dictionary()
    expander = QueryExpander(terms)
    for key, values in terms.forward.items():
        assert set(values) <= expander.expand(key), key
    for key, values in terms.reverse.items():
        assert set(values) <= expander.expand(key), key


def test_bundled_dictionary_is_symmetric() -> None:
    terms = get_term_dictionary()

    assert terms.version >= 1
    assert terms.asymmetric_entries() == []


def test_asymmetric_entries_are_reported() -> None:
    terms = TermDictionary.from_mapping(
        {
            "forward": {"חיפה": ["haifa"], "אילת": ["eilat"]},
            "reverse": {"haifa": ["חיפה"], "akko": ["עכו"]},
        }
    )

    assert terms.asymmetric_entries() == [("forward", "אילת"), ("reverse", "akko")]


def test_external_dictionary_file(tmp_path) -> None:
    path = tmp_path / "terms.json"
    path.write_text(
        '{"version": 2, "forward": {"נצרת": ["nazareth"]}, "reverse": {"Nazareth": ["נצרת"]}}',
        encoding="utf-8",
    )
    expander = QueryExpander(TermDictionary.load(path))

    assert "nazareth" in expander.expand("נצרת")
    assert "נצרת" in expander.expand("nazareth")
