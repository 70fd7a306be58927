from wiki_bridge.utils.wiki_helpers import (
    build_article_url,
    encode_uri_component,
    encoded_titles_length,
    format_path,
    join_titles,
)


def test_encode_uri_component():
    assert encode_uri_component("Marine biology") == "Marine%20biology"
    assert encode_uri_component("Algae|Penguin") == "Algae%7CPenguin"
    assert encode_uri_component("Café") == "Caf%C3%A9"
    assert encode_uri_component("Rock 'n' roll (music)!") == "Rock%20'n'%20roll%20(music)!"
    assert encode_uri_component("AC/DC") == "AC%2FDC"


def test_encoded_length_counts_separators():
    assert join_titles(["A", "B", "C"]) == "A|B|C"
    assert encoded_titles_length(["A", "B", "C"]) == 3 + 2 * 3
    assert encoded_titles_length(["é"]) == 6


def test_build_article_url():
    assert build_article_url("en.wikipedia.org", "Marine biology") == "https://en.wikipedia.org/wiki/Marine_biology"


def test_format_path():
    assert format_path(["Hydrogen", "Algae", "Penguin"]) == "Hydrogen → Algae → Penguin"
    assert format_path(["Penguin"]) == "Penguin"
