import errno

import pytest

import filerfs.constants as constants
from filerfs.filer import Entry, FuseAttributes
from filerfs.filesystem.common import (
    directory_attributes,
    FileStatus,
    Permission,
    RemoteFailureError,
    Result,
    Status,
    UserIdentity,
)


def test_permission_round_trip():
    for mode in [0, 0o755, 0o1777, 0o7777, 0xFFFF]:
        assert Permission.from_short(Permission(mode).to_short()) == Permission(mode)


def test_permission_from_short_keeps_16_bits():
    assert Permission.from_short(0x1_0000 | 0o644) == Permission(0o644)


def test_permission_out_of_range():
    with pytest.raises(ValueError):
        Permission(-1)

    with pytest.raises(ValueError):
        Permission(0x1_0000)


def test_permission_str():
    assert str(Permission(0o755)) == "rwxr-xr-x"
    assert str(Permission(0o640)) == "rw-r-----"
    assert str(Permission(0o1777)) == "rwxrwxrwt"
    assert str(Permission(0)) == "---------"


def test_permission_is_immutable():
    perm = Permission(0o755)

    with pytest.raises(AttributeError):
        perm.mode = 0o700


def test_current_user():
    user = UserIdentity.current()

    assert user.user_name
    assert len(user.group_names) >= 1
    assert user.primary_group == user.group_names[0]


def test_primary_group_without_groups():
    assert UserIdentity("nobody").primary_group == ""


def test_directory_attributes():
    user = UserIdentity("alice", ("staff", "wheel"))

    attributes = directory_attributes(Permission(0o750), user, 1234)

    assert attributes.mtime == 1234
    assert attributes.crtime == 1234
    assert attributes.file_mode == 0o750
    assert attributes.user_name == "alice"
    assert attributes.group_name == ["staff", "wheel"]
    assert attributes.file_size == 0


def test_attributes_read_back():
    user = UserIdentity("alice", ("staff", "wheel"))
    attributes = directory_attributes(Permission(0o750), user, 1234)

    status = FileStatus.from_entry("/a/b", Entry("b", True, attributes))

    assert status.permission == Permission(0o750)
    assert status.owner == "alice"
    assert status.group == "staff"
    assert status.modification_time == 1234
    assert status.is_directory
    assert status.path == "/a/b"


def test_file_status_constants():
    entry = Entry(
        name="file",
        is_directory=False,
        attributes=FuseAttributes(file_size=4096, mtime=99, crtime=1, file_mode=0o644),
    )

    status = FileStatus.from_entry("/file", entry)

    assert status.length == 4096
    assert not status.is_directory
    assert status.block_replication == constants.BLOCK_REPLICATION == 1
    assert status.block_size == constants.BLOCK_SIZE == 512
    assert status.access_time == 0


def test_file_status_without_groups():
    status = FileStatus.from_entry("/x", Entry("x", attributes=FuseAttributes()))

    assert status.group == ""
    assert status.owner == ""


def test_file_status_zero_mode():
    status = FileStatus.from_entry("/x", Entry("x", attributes=FuseAttributes()))

    assert status.permission == Permission(0)


def test_result_truthiness():
    assert Result(Status.OK, "/a")
    assert not Result(Status.NOT_FOUND, "/a")
    assert not Result(Status.REMOTE_FAILURE, "/a", "boom")


def test_result_raise_for_status():
    Result(Status.OK, "/a").raise_for_status()

    with pytest.raises(FileNotFoundError) as e:
        Result(Status.NOT_FOUND, "/a").raise_for_status()
    assert e.value.errno == errno.ENOENT
    assert e.value.filename == "/a"

    with pytest.raises(RemoteFailureError) as e:
        Result(Status.REMOTE_FAILURE, "/a", "boom").raise_for_status()
    assert e.value.errno == errno.EIO
    assert e.value.strerror == "boom"
