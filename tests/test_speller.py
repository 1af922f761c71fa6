import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))
import speller


@pytest.fixture(autouse=True)
def disable_tqdm(monkeypatch):
    """Replace tqdm with identity to avoid progress output during tests."""
    monkeypatch.setattr(speller, "tqdm", lambda iterable, *_, **__: iterable)


def test_tokenize_drops_punctuation_and_lowercases():
    assert list(speller.tokenize("Hello, World!")) == ["hello", "world"]
    assert list(speller.tokenize("Hello World")) == ["hello", "world"]
    assert list(speller.tokenize("...HELLO;;;world???")) == ["hello", "world"]


def test_tokenize_keeps_apostrophes_and_digits():
    assert list(speller.tokenize("Don't stop-believing, 42nd st.")) == ["don't", "stop", "believing", "42nd", "st"]


def test_tokenize_empty_and_separator_only():
    assert list(speller.tokenize("")) == []
    assert list(speller.tokenize(" \t-- !! \n")) == []


def test_tokenize_non_ascii_letters_split_words():
    assert list(speller.tokenize("café naïve")) == ["caf", "na", "ve"]


def test_tokenize_is_lazy_and_restartable():
    text = "one two"
    tokens = speller.tokenize(text)
    assert next(tokens) == "one"
    assert list(speller.tokenize(text)) == ["one", "two"]


def test_tokenize_lines_chains_lines():
    assert list(speller.tokenize_lines(["a b\n", "\n", "C"])) == ["a", "b", "c"]


def test_build_dictionary_is_case_insensitive(tmp_path):
    words = tmp_path / "words.txt"
    words.write_text("Apple, banana\nCherry's\n")
    extra = tmp_path / "extra.txt"
    extra.write_text("APPLE date\n")

    dictionary = speller.build_dictionary([str(words), str(extra)])

    assert dictionary == frozenset({"apple", "banana", "cherry's", "date"})


def test_dictionary_membership_ignores_case(tmp_path):
    words = tmp_path / "words.txt"
    words.write_text("Apple\n")
    dictionary = speller.build_dictionary([str(words)])

    assert speller.find_misspellings(["APPLE apple Apple\n"], dictionary) == []


def test_build_dictionary_source_order_does_not_matter(tmp_path):
    first = tmp_path / "first.txt"
    first.write_text("cat dog\n")
    second = tmp_path / "second.txt"
    second.write_text("dog bird\n")

    assert speller.build_dictionary([str(first), str(second)]) == speller.build_dictionary(
        [str(second), str(first)]
    )


def test_build_dictionary_missing_source(tmp_path):
    words = tmp_path / "words.txt"
    words.write_text("cat\n")
    missing = tmp_path / "missing.txt"

    with pytest.raises(speller.SourceUnavailable) as excinfo:
        speller.build_dictionary([str(words), str(missing)])

    assert excinfo.value.path == str(missing)
    assert "missing.txt" in str(excinfo.value)


def test_find_misspellings_reports_line_numbers():
    dictionary = frozenset({"cat", "dog", "bird"})
    assert speller.find_misspellings(["cat dgo\n", "bird"], dictionary) == [speller.Misspelling("dgo", 1)]


def test_find_misspellings_reports_every_occurrence_in_order():
    dictionary = frozenset({"cat"})
    result = speller.find_misspellings(["teh cat teh\n", "\n", "Zap teh\n"], dictionary)
    assert result == [("teh", 1), ("teh", 1), ("zap", 3), ("teh", 3)]
    assert result[2].text == "zap"
    assert result[2].line == 3


def test_find_misspellings_empty_input():
    assert speller.find_misspellings([], frozenset({"cat"})) == []


def test_scan_file_round_trip_has_no_misspellings(tmp_path):
    words = tmp_path / "words.txt"
    words.write_text("The quick, brown FOX's\njumps over 3 lazy dogs.\n")
    dictionary = speller.build_dictionary([str(words)])

    assert speller.scan_file(str(words), dictionary) == []


def test_scan_file_missing_target(tmp_path):
    with pytest.raises(speller.SourceUnavailable):
        speller.scan_file(str(tmp_path / "missing.txt"), frozenset({"cat"}))


def test_find_replacements_deletion():
    assert speller.find_replacements("cats", frozenset({"cat"})) == ["cat"]


def test_find_replacements_insertion():
    assert speller.find_replacements("cat", frozenset({"cats"})) == ["cats"]


def test_find_replacements_deduplicates():
    dictionary = frozenset({"misspelled"})
    assert speller.find_replacements("mispelled", dictionary) == ["misspelled"]


def test_find_replacements_duplicate_deletions_listed_once():
    # Deleting either 'g' of 'dogg' gives 'dog'
    assert speller.find_replacements("dogg", frozenset({"dog"})) == ["dog"]


def test_find_replacements_order():
    dictionary = frozenset({"at", "ba", "abat", "boat", "bait", "bats", "bt"})
    assert speller.find_replacements("bat", dictionary) == ["at", "bt", "ba", "abat", "boat", "bait", "bats"]


def test_find_replacements_insertion_letters_alphabetical():
    dictionary = frozenset({"hat", "cat", "bat"})
    assert speller.find_replacements("at", dictionary) == ["bat", "cat", "hat"]


def test_find_replacements_no_candidates():
    assert speller.find_replacements("zzzzq", frozenset({"cat", "dog"})) == []


def test_find_replacements_ignores_substitutions_and_transpositions():
    dictionary = frozenset({"the", "cut"})
    assert speller.find_replacements("teh", dictionary) == []
    assert speller.find_replacements("cat", dictionary) == []


def test_find_replacements_calls_are_independent():
    dictionary = frozenset({"cat"})
    assert speller.find_replacements("cats", dictionary) == ["cat"]
    assert speller.find_replacements("cart", dictionary) == ["cat"]


def test_generate_deletions_and_insertions():
    assert list(speller.generate_deletions("abc")) == ["bc", "ac", "ab"]
    insertions = list(speller.generate_insertions("a"))
    assert len(insertions) == 52
    assert insertions[:2] == ["aa", "ba"]
    assert insertions[-1] == "az"
