import unittest

from flac_sort.naming import (
    album_dir_name,
    bracket_groups,
    extract_genre,
    format_album,
    format_artist,
    format_title,
    split_album_dir_name,
)


class TestFormatAlbum(unittest.TestCase):
    def test_strips_bracket_groups_and_year(self) -> None:
        self.assertEqual(
            format_album("the koln concert (1975) [Jazz] [24B-96kHz]"),
            "The Koln Concert",
        )

    def test_capitalizes_words_and_spells_out_ampersand(self) -> None:
        self.assertEqual(format_album("salt & pepper"), "Salt And Pepper")

    def test_keeps_non_year_parentheses_content(self) -> None:
        self.assertEqual(format_album("live (deluxe edition)"), "Live Deluxe Edition")

    def test_apostrophe_does_not_capitalize(self) -> None:
        self.assertEqual(format_album("don't stop"), "Don't Stop")

    def test_collapses_whitespace(self) -> None:
        self.assertEqual(format_album("  kind   of  blue "), "Kind Of Blue")

    def test_is_idempotent(self) -> None:
        for raw in ("salt & pepper", "don't stop [Rock]", "a.b.c (1999)", "featuring you"):
            once = format_album(raw)
            self.assertEqual(format_album(once), once, raw)


class TestFormatArtist(unittest.TestCase):
    def test_lowercase_and(self) -> None:
        self.assertEqual(format_artist("simon & garfunkel"), "Simon and Garfunkel")
        self.assertEqual(format_artist("Simon And Garfunkel"), "Simon and Garfunkel")

    def test_initials_after_period(self) -> None:
        self.assertEqual(format_artist("r.e.m."), "R.E.M.")

    def test_featuring_becomes_lowercase_feat(self) -> None:
        self.assertEqual(format_artist("miles davis featuring john coltrane"), "Miles Davis feat. John Coltrane")
        self.assertEqual(format_artist("Miles Davis Feat. John Coltrane"), "Miles Davis feat. John Coltrane")

    def test_is_idempotent(self) -> None:
        for raw in ("simon & garfunkel", "r.e.m.", "a featuring b", "o'connor"):
            once = format_artist(raw)
            self.assertEqual(format_artist(once), once, raw)


class TestFormatTitle(unittest.TestCase):
    def test_title_keeps_brackets(self) -> None:
        self.assertEqual(format_title("so what (live) [remaster]"), "So What (Live) [Remaster]")

    def test_title_ampersand(self) -> None:
        self.assertEqual(format_title("hello & goodbye"), "Hello And Goodbye")


class TestDirectoryNames(unittest.TestCase):
    def test_split_on_first_separator(self) -> None:
        self.assertEqual(split_album_dir_name("A - B - C"), ("A", "B - C"))

    def test_split_rejects_names_without_separator(self) -> None:
        self.assertIsNone(split_album_dir_name("NoSeparator"))
        self.assertIsNone(split_album_dir_name("Artist-Album"))

    def test_album_dir_name(self) -> None:
        self.assertEqual(album_dir_name("Foo", "Bar"), "Foo - Bar")

    def test_bracket_groups(self) -> None:
        self.assertEqual(bracket_groups("A - B [Jazz] [24B-96kHz]"), ["Jazz", "24B-96kHz"])

    def test_extract_genre_takes_last_group_as_written(self) -> None:
        self.assertEqual(extract_genre("Foo - Bar [Jazz] [24B-96]", "Rock"), "24B-96")
        self.assertEqual(extract_genre("Foo - Bar [24B-96] [Jazz]"), "Jazz")
        self.assertEqual(extract_genre("A - B [FLAC] [Rock]"), "Rock")

    def test_extract_genre_fallback(self) -> None:
        self.assertIsNone(extract_genre("A - B"))
        self.assertEqual(extract_genre("A - B []", fallback="Pop"), "Pop")


if __name__ == "__main__":
    unittest.main()
