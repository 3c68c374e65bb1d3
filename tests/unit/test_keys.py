"""Tests for target key conventions."""

from revive.keys import display_key, file_store, is_file, standardize_key


def test_file_store_quotes_path():
    assert file_store("report.md") == '"report.md"'
    assert file_store("./data//raw.csv") == '"data/raw.csv"'
    assert file_store("data\\raw.csv") == '"data/raw.csv"'


def test_is_file():
    assert is_file('"report.md"')
    assert not is_file("report")
    assert not is_file('"')


def test_display_key():
    assert display_key('"report.md"') == "report.md"
    assert display_key("report") == "report"


def test_standardize_key():
    assert standardize_key("  small ") == "small"
    assert standardize_key("'report.md'") == '"report.md"'
    assert standardize_key('"./report.md"') == '"report.md"'
