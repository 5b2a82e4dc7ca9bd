import pytest

from recurate.core.exceptions import ValidationError
from recurate.storage.local_storage import (
    IMAGE,
    POST_MEDIA_TYPES,
    PROFILE_PHOTO_TYPES,
    VIDEO,
)


def test_save_image(local_storage, make_upload):
    stored = local_storage.save_upload(make_upload("Holiday.PNG", b"png-bytes", "image/png"), POST_MEDIA_TYPES)
    assert stored.kind == IMAGE
    assert stored.mime_type == "image/png"
    assert stored.path.startswith("/uploads/") and stored.path.endswith(".png")
    assert local_storage.get_file_path(stored.path).read_bytes() == b"png-bytes"


def test_save_video(local_storage, make_upload):
    stored = local_storage.save_upload(make_upload("clip.mov", b"mov", "video/quicktime"), POST_MEDIA_TYPES)
    assert stored.kind == VIDEO


def test_declared_type_with_parameters(local_storage, make_upload):
    stored = local_storage.save_upload(make_upload("a.jpg", b"jpg", "image/jpeg; charset=binary"),
                                       PROFILE_PHOTO_TYPES)
    assert stored.mime_type == "image/jpeg"


def test_extension_used_when_type_is_generic(local_storage, make_upload):
    stored = local_storage.save_upload(make_upload("a.mp4", b"mp4", "application/octet-stream"), POST_MEDIA_TYPES)
    assert stored.kind == VIDEO
    assert stored.mime_type == "video/mp4"


@pytest.mark.parametrize("filename", ["evil.html", "evil.svg", "evil.png.html", "noext"])
def test_stored_extension_comes_from_validated_type(local_storage, make_upload, filename):
    stored = local_storage.save_upload(make_upload(filename, b"<script>x</script>", "image/png"), POST_MEDIA_TYPES)
    assert stored.path.endswith(".png")
    assert [p.suffix for p in local_storage.upload_dir.iterdir()] == [".png"]


def test_each_upload_gets_a_unique_name(local_storage, make_upload):
    first = local_storage.save_upload(make_upload("a.png"), POST_MEDIA_TYPES)
    second = local_storage.save_upload(make_upload("a.png"), POST_MEDIA_TYPES)
    assert first.path != second.path


def test_rejected_type_writes_nothing(local_storage, make_upload):
    with pytest.raises(ValidationError):
        local_storage.save_upload(make_upload("a.gif", b"gif", "image/gif"), PROFILE_PHOTO_TYPES)
    assert list(local_storage.upload_dir.iterdir()) == []


def test_oversized_upload_is_rejected_and_cleaned_up(local_storage, make_upload):
    local_storage.max_file_size = 10
    with pytest.raises(ValidationError, match="too large"):
        local_storage.save_upload(make_upload("a.png", b"x" * 11), POST_MEDIA_TYPES)
    assert list(local_storage.upload_dir.iterdir()) == []


@pytest.mark.parametrize("filename", [None, ""])
def test_no_file_selected(local_storage, make_upload, filename):
    assert local_storage.save_upload(None, POST_MEDIA_TYPES) is None
    assert local_storage.save_upload(make_upload(filename=filename, data=b""), POST_MEDIA_TYPES) is None


def test_delete_file(local_storage, make_upload):
    stored = local_storage.save_upload(make_upload("a.png"), POST_MEDIA_TYPES)
    assert local_storage.delete_file(stored.path) is True
    assert not local_storage.file_exists(stored.path)
    assert local_storage.delete_file(stored.path) is False
    assert local_storage.delete_file("") is False


def test_delete_cannot_escape_upload_dir(local_storage, tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep me")
    assert local_storage.delete_file("/uploads/../secret.txt") is False
    assert outside.exists()
