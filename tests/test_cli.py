import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from flac_sort.cli import main
from flac_sort.commands.check_dirs import iter_leaf_dirs_without_audio
from flac_sort.commands.clean_names import cleaned_name
from flac_sort.commands.info import format_track_line
from flac_sort.tagging import FlacTagStore

from tests.fakes import MemoryTagStore, touch, write_flac, write_image


def run_cli(*argv: str):
    out = io.StringIO()
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class TestInfoCommand(unittest.TestCase):
    def test_track_line_format(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            FlacTagStore().set_tags(
                path,
                {
                    "TRACKNUMBER": "3",
                    "TRACKTOTAL": "12",
                    "DISCNUMBER": "1",
                    "DISCTOTAL": "2",
                    "GENRE": "Jazz",
                    "TITLE": "So What",
                    "ARTIST": "Miles Davis",
                    "ALBUMARTIST": "Miles Davis",
                    "COMPILATION": "1",
                },
            )
            code, out, _ = run_cli("info", str(path))

            self.assertEqual(code, 0)
            expected = "3 of 12 / 1 of 2 44100/16  C  Jazz    So What    Miles Davis / Miles Davis"
            self.assertIn(expected, out.splitlines())

    def test_defaults_for_missing_tags(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = touch(Path(tmpdir) / "01.flac")
            line = format_track_line(MemoryTagStore(), path)
            self.assertTrue(line.startswith("0 of 0 / 1 of 1 44100/16     "))

    def test_missing_file(self) -> None:
        code, out, _ = run_cli("info", "/this/path/does/not/exist.flac")
        self.assertEqual(code, 1)
        self.assertIn("File not found", out)


class TestTagsCommand(unittest.TestCase):
    def test_dry_run_leaves_file_untouched(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            FlacTagStore().set_tag(path, "GENRE", "Jazz")

            code, out, _ = run_cli("tags", "-n", tmpdir, "GENRE", "Jazz", "Blues")

            self.assertEqual(code, 0)
            self.assertIn("DRY-RUN: would update: Jazz -> Blues", out)
            self.assertEqual(FlacTagStore().get_tag(path, "GENRE"), "Jazz")

    def test_overwrite_recursive_with_stats(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "Album" / "01.flac")
            other = write_flac(Path(tmpdir) / "Album" / "02.flac")
            FlacTagStore().set_tag(path, "GENRE", "Jazz")

            code, _, err = run_cli("tags", "-o", tmpdir, "GENRE", "^Jazz$", "Blues", "-r", "--stats", "--quiet")

            self.assertEqual(code, 0)
            self.assertEqual(FlacTagStore().get_tag(path, "GENRE"), "Blues")
            self.assertIsNone(FlacTagStore().get_tag(other, "GENRE"))
            self.assertIn("Updated:           1", err)
            self.assertIn("Files without tag: 1", err)

    def test_delete_on_match(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            FlacTagStore().set_tag(path, "COMMENT", "ripped by foo")

            run_cli("tags", "-o", tmpdir, "COMMENT", "ripped", "-d")

            self.assertIsNone(FlacTagStore().get_tag(path, "COMMENT"))

    def test_non_matching_value_is_kept(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            FlacTagStore().set_tag(path, "GENRE", "Rock")

            code, out, _ = run_cli("tags", "-o", tmpdir, "GENRE", "^Jazz$", "Blues")

            self.assertEqual(code, 0)
            self.assertIn("(no match) - kept: Rock", out)
            self.assertEqual(FlacTagStore().get_tag(path, "GENRE"), "Rock")

    def test_invalid_regex_exits_1(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            FlacTagStore().set_tag(path, "GENRE", "Jazz")

            code, _, err = run_cli("tags", "-o", tmpdir, "GENRE", "(unclosed", "Blues")

            self.assertEqual(code, 1)
            self.assertIn("invalid regex", err)
            self.assertEqual(FlacTagStore().get_tag(path, "GENRE"), "Jazz")

    def test_not_a_directory_exits_2(self) -> None:
        code, _, err = run_cli("tags", "-i", "/this/path/does/not/exist", "GENRE")
        self.assertEqual(code, 2)
        self.assertIn("is not a directory", err)


class TestCheckDirsAndCleanNames(unittest.TestCase):
    def test_leaf_directories_without_audio(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            touch(root / "A - B" / "01.flac")
            (root / "Album2" / "_extras").mkdir(parents=True)
            touch(root / "Empty" / "cover.jpg")
            (root / "Parent" / "Child").mkdir(parents=True)
            (root / "_skip").mkdir()

            found = list(iter_leaf_dirs_without_audio(root, [".flac"]))

            self.assertEqual(found, [root / "Album2", root / "Empty", root / "Parent" / "Child"])

    def test_clean_removes_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            touch(root / "Empty" / "cover.jpg")
            touch(root / "A - B" / "01.flac")

            code, out, _ = run_cli("check-dirs", tmpdir, "--clean")

            self.assertEqual(code, 0)
            self.assertIn("Removing:", out)
            self.assertFalse((root / "Empty").exists())
            self.assertTrue((root / "A - B").exists())

    def test_clean_names(self) -> None:
        self.assertEqual(cleaned_name("A - B [MP4] [Unknown]", "Rock"), "A - B [FLAC] [Rock]")
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "A - B [Unknown]").mkdir()
            (root / "C - D [Unknown]").mkdir()
            (root / "C - D [Jazz]").mkdir()

            code, out, _ = run_cli("clean-names", "--directory", tmpdir)

            self.assertEqual(code, 0)
            self.assertTrue((root / "A - B [Jazz]").is_dir())
            self.assertTrue((root / "C - D [Unknown]").is_dir())
            self.assertIn("SKIP", out)


class TestTagCommand(unittest.TestCase):
    def test_tags_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_flac(Path(tmpdir) / "01.flac")
            write_image(Path(tmpdir) / "cover.jpg")

            code, _, _ = run_cli("tag", "Bar", "Foo", "Jazz", "Y", "--directory", tmpdir)

            self.assertEqual(code, 0)
            store = FlacTagStore()
            self.assertEqual(store.get_tag(path, "ALBUM"), "Bar")
            self.assertEqual(store.get_tag(path, "COMPILATION"), "1")
            self.assertEqual(store.get_tag(path, "ARTIST"), "Foo")

    def test_missing_cover_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            write_flac(Path(tmpdir) / "01.flac")
            code, _, _ = run_cli("tag", "Bar", "Foo", "Jazz", "N", "--directory", tmpdir)
            self.assertEqual(code, 1)


class TestUsage(unittest.TestCase):
    def test_usage_errors_exit_1(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            run_cli("tag", "only-one-arg")
        self.assertEqual(ctx.exception.code, 1)

    def test_bad_compilation_flag(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            run_cli("tag", "Bar", "Foo", "Jazz", "maybe")
        self.assertEqual(ctx.exception.code, 1)

    def test_sort_missing_root(self) -> None:
        code, _, _ = run_cli("sort", "/this/path/does/not/exist", "Jazz")
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
