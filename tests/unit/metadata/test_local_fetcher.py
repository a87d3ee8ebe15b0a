"""Tests for local ``FileInfo`` classification and the threaded fetcher."""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from pathlib import Path

from filelauncher.metadata import LocalFileInfoFetcher, guess_mime_type, query_file_info
from filelauncher.paths import FilePath


def _info_for(path: Path):
    return query_file_info(FilePath.from_local_path(str(path)))


class QueryFileInfoTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()

    def test_directory(self) -> None:
        info = _info_for(self.root)

        assert info is not None
        self.assertTrue(info.is_dir)
        self.assertEqual(info.mime_type, "inode/directory")

    def test_missing_and_remote_paths_are_unresolved(self) -> None:
        self.assertIsNone(_info_for(self.root / "missing.txt"))
        self.assertIsNone(query_file_info(FilePath.from_uri("sftp://host/file.txt")))

    def test_plain_text_is_not_executable(self) -> None:
        notes = self.root / "notes.txt"
        notes.write_text("hello\n", encoding="utf-8")

        info = _info_for(notes)

        assert info is not None
        self.assertEqual(info.mime_type, "text/plain")
        self.assertFalse(info.is_executable_type)
        self.assertFalse(info.is_desktop_entry)

    def test_script_with_exec_bit_is_executable_type(self) -> None:
        script = self.root / "run"
        script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR)

        info = _info_for(script)

        assert info is not None
        self.assertTrue(info.is_executable_type)
        self.assertEqual(info.mime_type, "application/x-shellscript")

    def test_script_without_exec_bit_is_not_executable_type(self) -> None:
        script = self.root / "run"
        script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
        script.chmod(0o644)

        info = _info_for(script)

        assert info is not None
        self.assertFalse(info.is_executable_type)

    def test_application_desktop_entry(self) -> None:
        desktop_file = self.root / "tool.desktop"
        desktop_file.write_text("[Desktop Entry]\nType=Application\nExec=tool\n", encoding="utf-8")

        info = _info_for(desktop_file)

        assert info is not None
        self.assertTrue(info.is_desktop_entry)
        self.assertTrue(info.is_executable_type)
        self.assertFalse(info.is_shortcut)
        self.assertEqual(info.target, "")
        self.assertEqual(info.mime_type, "application/x-desktop")

    def test_link_desktop_entry_is_a_shortcut(self) -> None:
        desktop_file = self.root / "site.desktop"
        desktop_file.write_text("[Desktop Entry]\nType=Link\nURL=https://example.com\n", encoding="utf-8")

        info = _info_for(desktop_file)

        assert info is not None
        self.assertTrue(info.is_shortcut)
        self.assertEqual(info.target, "https://example.com")

    def test_symlink_keeps_link_text_as_target(self) -> None:
        notes = self.root / "notes.txt"
        notes.write_text("hello\n", encoding="utf-8")
        link = self.root / "latest"
        os.symlink("notes.txt", link)

        info = _info_for(link)

        assert info is not None
        self.assertEqual(info.target, "notes.txt")
        self.assertFalse(info.is_dir)

    def test_undecodable_file_name_is_resolved(self) -> None:
        odd = self.root / os.fsdecode(b"\xff.txt")
        odd.write_bytes(b"hello\n")

        info = _info_for(odd)

        assert info is not None
        self.assertEqual(info.path.local_path(), str(odd))
        self.assertEqual(info.mime_type, "text/plain")

    def test_broken_symlink_is_unresolved(self) -> None:
        link = self.root / "dangling"
        os.symlink(self.root / "nowhere", link)

        self.assertIsNone(_info_for(link))


class GuessMimeTypeTests(unittest.TestCase):
    def test_extension_table_wins(self) -> None:
        self.assertEqual(guess_mime_type("/tmp/a.png", b""), "image/png")

    def test_pygments_covers_source_files(self) -> None:
        self.assertEqual(guess_mime_type("/tmp/main.zig", b"const std = @import(\"std\");\n"), "text/zig")

    def test_content_sniffing(self) -> None:
        self.assertEqual(guess_mime_type("/tmp/blob", b"\x7fELF\x02\x01"), "application/x-executable")
        self.assertEqual(guess_mime_type("/tmp/README", b"plain words\n"), "text/plain")
        self.assertEqual(guess_mime_type("/tmp/blob", b"\x00\x01\x02"), "application/octet-stream")


class LocalFileInfoFetcherTests(unittest.TestCase):
    def test_fetch_keeps_order_and_skips_unresolved_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "b.txt").write_text("b\n", encoding="utf-8")
            (root / "a.txt").write_text("a\n", encoding="utf-8")
            paths = [
                FilePath.from_local_path(str(root / "b.txt")),
                FilePath.from_local_path(str(root / "missing")),
                FilePath.from_local_path(str(root / "a.txt")),
            ]

            with LocalFileInfoFetcher() as fetcher:
                infos = fetcher.fetch(paths).result(timeout=5.0)

        self.assertEqual([info.path for info in infos], [paths[0], paths[2]])


if __name__ == "__main__":
    unittest.main()
