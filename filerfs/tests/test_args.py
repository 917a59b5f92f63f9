import pytest

from filerfs.args import Arguments


def test_no_args():
    with pytest.raises(SystemExit):
        Arguments.parse([])


def test_basic_usage():
    args = Arguments.parse(["ls", "/data"])

    assert args.command == "ls"
    assert args.path == "/data"

    assert not args.recursive
    assert not args.debug
    assert args.mode is None
    assert args.host is None


def test_unknown_command():
    with pytest.raises(SystemExit):
        Arguments.parse(["cp", "/data"])


def test_recursive():
    args = Arguments.parse(["rm", "-r", "/data"])
    assert args.recursive


def test_mode_parsing():
    args = Arguments.parse(["mkdir", "--mode=750", "/data"])
    assert args.mode == 0o750

    with pytest.raises(SystemExit):
        Arguments.parse(["mkdir", "--mode=abc", "/data"])

    with pytest.raises(SystemExit):
        Arguments.parse(["mkdir", "--mode=17777", "/data"])


def test_connection_overrides():
    args = Arguments.parse(
        ["--host=filer.local", "--port=1234", "--token=secret", "stat", "/data"]
    )

    assert args.host == "filer.local"
    assert args.port == 1234
    assert args.token == "secret"


def test_timeout():
    args = Arguments.parse(["--timeout=1234", "ls", "/"])
    assert args.timeout == 1234

    with pytest.raises(SystemExit):
        Arguments.parse(["--timeout=-1", "ls", "/"])
