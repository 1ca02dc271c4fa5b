"""Tests for the temp-file guard and clipboard path sanitising."""

import os
import sys
from unittest.mock import MagicMock

import pytest

from imagecomment.clipboard.constants import MAX_IMAGE_SIZE
from imagecomment.clipboard.guard import (
    check_candidate,
    discard_temp_file,
    is_inside_temp_dir,
    new_temp_path,
    sanitize_clipboard_path,
)
from imagecomment.clipboard.models import ImageSource

from helpers import PNG_BYTES


def _sparse(path, size):
    with open(path, "wb") as f:
        f.truncate(size)
    return path


class TestSanitize:
    def test_plain_path(self):
        assert str(sanitize_clipboard_path("/home/me/a.png\n")) == os.path.normpath(
            "/home/me/a.png"
        )

    def test_file_uri_is_decoded(self):
        path = sanitize_clipboard_path("file:///home/me/my%20shot.png")
        assert str(path) == os.path.normpath("/home/me/my shot.png")

    def test_windows_drive_uri(self):
        path = sanitize_clipboard_path("file:///C:/Users/me/a.png")
        assert str(path) == os.path.normpath("C:/Users/me/a.png")

    def test_only_first_line_is_used(self):
        path = sanitize_clipboard_path("/home/me/a.png\n/etc/passwd\n")
        assert str(path) == os.path.normpath("/home/me/a.png")

    def test_uri_list_comments_skipped(self):
        raw = "# copied from files\nfile:///home/me/b.png\n"
        assert str(sanitize_clipboard_path(raw)) == os.path.normpath("/home/me/b.png")

    def test_control_characters_removed(self):
        path = sanitize_clipboard_path("/home/me/\x1b[31ma\x07.png\x00")
        assert "\x1b" not in str(path)
        assert "\x00" not in str(path)
        assert str(path).endswith("a.png")

    def test_dot_segments_normalised(self):
        path = sanitize_clipboard_path("/home/me/../me/./c.png")
        assert str(path) == os.path.normpath("/home/me/c.png")

    @pytest.mark.parametrize("raw", [None, "", "   \n", "# only a comment\n", "\x00\x01"])
    def test_empty_input(self, raw):
        assert sanitize_clipboard_path(raw) is None


class TestTempDir:
    def test_new_temp_path_is_inside_temp_dir(self, temp_dir):
        path = new_temp_path("png")
        assert path.parent == temp_dir.resolve()
        assert path.suffix == ".png"
        assert is_inside_temp_dir(path)

    def test_outside_temp_dir(self, tmp_path):
        assert is_inside_temp_dir(tmp_path / "elsewhere.png") is False

    def test_temp_dir_itself_is_not_inside(self, temp_dir):
        assert is_inside_temp_dir(temp_dir) is False

    def test_traversal_out_of_temp_dir(self, temp_dir):
        assert is_inside_temp_dir(temp_dir / ".." / "escape.png") is False


class TestDiscard:
    def test_removes_temp_file(self):
        path = new_temp_path("png")
        path.write_bytes(PNG_BYTES)
        assert discard_temp_file(path) is True
        assert not path.exists()

    def test_refuses_file_outside_temp_dir(self, tmp_path):
        user_file = tmp_path / "mine.png"
        user_file.write_bytes(PNG_BYTES)
        assert discard_temp_file(user_file) is False
        assert user_file.exists()

    def test_missing_file_is_not_an_error(self):
        assert discard_temp_file(new_temp_path("png")) is False

    def test_none(self):
        assert discard_temp_file(None) is False


class TestCheckCandidate:
    def test_valid_user_image(self, tmp_path):
        path = tmp_path / "photo.png"
        path.write_bytes(PNG_BYTES)
        info = check_candidate(path, ImageSource.USER)
        assert info is not None
        assert info.path == path
        assert info.extension == "png"
        assert info.is_temp is False

    def test_extension_is_lowercased(self, tmp_path):
        path = tmp_path / "PHOTO.JPEG"
        path.write_bytes(PNG_BYTES)
        assert check_candidate(path, ImageSource.USER).extension == "jpeg"

    @pytest.mark.parametrize("name", ["notes.txt", "image.tiff", "archive.png.zip", "noext"])
    def test_unsupported_extension_ignores_content(self, tmp_path, name):
        path = tmp_path / name
        path.write_bytes(PNG_BYTES)
        assert check_candidate(path, ImageSource.USER) is None
        assert path.exists()

    def test_unsupported_temp_file_is_deleted(self):
        path = new_temp_path("txt")
        path.write_bytes(PNG_BYTES)
        assert check_candidate(path, ImageSource.TEMP) is None
        assert not path.exists()

    def test_missing_file(self, tmp_path):
        assert check_candidate(tmp_path / "gone.png", ImageSource.USER) is None

    def test_directory_rejected(self, tmp_path):
        folder = tmp_path / "album.png"
        folder.mkdir()
        assert check_candidate(folder, ImageSource.USER) is None

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlink_rejected(self, tmp_path):
        target = tmp_path / "real.png"
        target.write_bytes(PNG_BYTES)
        link = tmp_path / "link.png"
        link.symlink_to(target)
        assert check_candidate(link, ImageSource.USER) is None

    def test_oversized_user_file_warns_and_is_kept(self, tmp_path):
        path = _sparse(tmp_path / "huge.png", MAX_IMAGE_SIZE + 1)
        warn = MagicMock()
        assert check_candidate(path, ImageSource.USER, warn=warn) is None
        warn.assert_called_once_with(MAX_IMAGE_SIZE + 1, MAX_IMAGE_SIZE)
        assert path.exists()

    def test_oversized_temp_file_is_deleted(self):
        path = _sparse(new_temp_path("png"), MAX_IMAGE_SIZE + 1024)
        warn = MagicMock()
        assert check_candidate(path, ImageSource.TEMP, warn=warn) is None
        warn.assert_called_once()
        assert not path.exists()

    def test_exactly_at_limit_is_accepted(self, tmp_path):
        path = _sparse(tmp_path / "edge.png", MAX_IMAGE_SIZE)
        assert check_candidate(path, ImageSource.USER) is not None
