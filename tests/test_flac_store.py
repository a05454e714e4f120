import tempfile
import unittest
from pathlib import Path

from mutagen.flac import FLAC

from flac_sort.models import MetadataWriteFailed
from flac_sort.tagging import FlacTagStore

from tests.fakes import touch, write_flac, write_image


class TestFlacTagStore(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FlacTagStore()

    def test_set_and_read_tags(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            self.assertEqual(self.store.get_tags(path), {})

            self.store.set_tags(path, {"TITLE": "So What", "genre": "Jazz"})
            self.store.set_tag(path, "TRACKNUMBER", "1")

            tags = self.store.get_tags(path)
            self.assertEqual(tags["TITLE"], ["So What"])
            self.assertEqual(tags["GENRE"], ["Jazz"])
            self.assertEqual(self.store.get_tag(path, "tracknumber"), "1")

    def test_replace_and_remove(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            self.store.set_tags(path, {"COMMENT": "rip", "TITLE": "Old"})

            self.store.replace_tags(path, {"TITLE": "New", "ARTIST": "Foo"})
            self.assertEqual(sorted(self.store.get_tags(path)), ["ARTIST", "TITLE"])

            self.store.remove_tag(path, "ARTIST")
            self.assertIsNone(self.store.get_tag(path, "ARTIST"))

            self.store.remove_all_tags(path)
            self.assertEqual(self.store.get_tags(path), {})

    def test_stream_info(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            self.assertEqual(self.store.sample_rate(path), 44100)
            self.assertEqual(self.store.bit_depth(path), 16)

    def test_import_picture_as_front_cover(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            cover = write_image(Path(tmpdir) / "cover.jpg", size=(30, 20))

            self.store.import_picture(path, cover)
            pictures = FLAC(path).pictures
            self.assertEqual(len(pictures), 1)
            self.assertEqual(pictures[0].type, 3)
            self.assertEqual(pictures[0].mime, "image/jpeg")
            self.assertEqual((pictures[0].width, pictures[0].height), (30, 20))
            self.assertEqual(pictures[0].data, cover.read_bytes())

            self.store.remove_pictures(path)
            self.assertEqual(FLAC(path).pictures, [])

    def test_non_flac_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = touch(Path(tmpdir) / "broken.flac")
            self.assertEqual(self.store.get_tags(path), {})
            self.assertIsNone(self.store.sample_rate(path))
            with self.assertRaises(MetadataWriteFailed):
                self.store.set_tag(path, "TITLE", "x")


if __name__ == "__main__":
    unittest.main()
