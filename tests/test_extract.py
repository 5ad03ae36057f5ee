from __future__ import annotations

import asyncio
import os
import stat
import sys

import pytest

from safe_decompress import (
    DecodeError,
    Entry,
    EntryType,
    ExtractOptions,
    InvalidInputError,
    PathEscapeError,
    SymlinkWriteRefusedError,
    extract,
    extract_sync,
)
from safe_decompress.materialize import current_umask
from safe_decompress.plugins import ArchivePlugin

MTIME = 1_600_000_000

TREE = [
    {"name": "a", "type": "dir"},
    {"name": "a/b", "type": "dir"},
    {"name": "a/b/c.txt", "data": b"content of c", "mode": 0o640},
    {"name": "a/run.sh", "data": b"#!/bin/sh\n", "mode": 0o755},
]


def run(coro):
    return asyncio.run(coro)


@pytest.mark.parametrize("compression", ["", "gz", "bz2"])
def test_round_trip_tar(make_tar, output_dir, compression):
    entries = run(extract(make_tar(TREE, compression), output_dir))

    assert [entry.path for entry in entries] == ["a", "a/b", "a/b/c.txt", "a/run.sh"]
    umask = current_umask()
    for member in TREE:
        target = output_dir / member["name"]
        assert target.stat().st_mtime == pytest.approx(MTIME)
        if member.get("type") == "dir":
            assert target.is_dir()
        else:
            assert target.read_bytes() == member["data"]
            assert stat.S_IMODE(target.stat().st_mode) == member["mode"] & ~umask


def test_directory_mtime_survives_links_created_inside(make_tar, output_dir):
    data = make_tar(
        [
            {"name": "d", "type": "dir"},
            {"name": "d/f.txt", "data": b"f"},
            {"name": "d/hard", "type": "link", "linkname": "d/f.txt"},
            {"name": "d/soft", "type": "symlink", "linkname": "f.txt"},
        ]
    )
    run(extract(data, output_dir))

    assert (output_dir / "d").stat().st_mtime == pytest.approx(MTIME)
    assert os.readlink(output_dir / "d" / "soft") == "f.txt"


def test_round_trip_zip(make_zip, output_dir):
    data = make_zip(
        [
            {"name": "a/b/c.txt", "data": b"zip content", "mode": 0o600},
            {"name": "a/link", "type": "symlink", "linkname": "b/c.txt"},
        ]
    )
    entries = run(extract(data, output_dir))

    assert {entry.path for entry in entries} == {"a/b/c.txt", "a/link"}
    assert (output_dir / "a" / "b" / "c.txt").read_bytes() == b"zip content"
    assert os.readlink(output_dir / "a" / "link") == "b/c.txt"
    assert (output_dir / "a" / "link").read_bytes() == b"zip content"


def test_unrepresentable_timestamps_still_extract(make_zip, make_tar, output_dir):
    zipped = make_zip([{"name": "dos.txt", "data": b"dos", "date_time": (1980, 0, 0, 0, 0, 0)}])
    tarred = make_tar([{"name": "far.txt", "data": b"far", "mtime": 10**18}])

    run(extract(zipped, output_dir))
    run(extract(tarred, output_dir))

    assert (output_dir / "dos.txt").read_bytes() == b"dos"
    assert (output_dir / "far.txt").read_bytes() == b"far"
    assert (output_dir / "far.txt").stat().st_mtime == 0


def test_extract_from_path(make_tar, tmp_path, output_dir):
    archive = tmp_path / "archive.tar"
    archive.write_bytes(make_tar(TREE))

    run(extract(str(archive), output_dir))
    run(extract(archive, tmp_path / "second"))

    assert (output_dir / "a" / "b" / "c.txt").read_bytes() == b"content of c"
    assert (tmp_path / "second" / "a" / "run.sh").exists()


def test_hard_links_resolved_after_targets(make_tar, output_dir):
    data = make_tar(
        [
            {"name": "alias.txt", "type": "link", "linkname": "data/original.txt"},
            {"name": "data/original.txt", "data": b"shared"},
        ]
    )
    run(extract(data, output_dir))
    assert os.path.samefile(output_dir / "alias.txt", output_dir / "data" / "original.txt")


@pytest.mark.parametrize("hostile", ["../escape.txt", "a/../../escape.txt", "/abs/escape.txt"])
def test_hostile_paths_fail_without_escaping(static_plugin, tmp_path, output_dir, hostile):
    plugin = static_plugin(
        [
            Entry(path="fine.txt", type=EntryType.FILE, data=b"ok"),
            Entry(path=hostile, type=EntryType.FILE, data=b"pwned"),
        ]
    )

    with pytest.raises(PathEscapeError):
        run(extract(b"anything", output_dir, plugins=[plugin]))

    # entries that were fine stay on disk
    assert (output_dir / "fine.txt").read_bytes() == b"ok"
    assert not (tmp_path / "escape.txt").exists()
    assert not os.path.exists("/abs/escape.txt")


def test_tar_traversal_fails(make_tar, tmp_path, output_dir):
    data = make_tar([{"name": "../../escape.txt", "data": b"pwned"}])
    with pytest.raises(PathEscapeError):
        run(extract(data, output_dir))
    assert not (tmp_path / "escape.txt").exists()
    assert not (tmp_path.parent / "escape.txt").exists()


def test_symlink_then_write_through_it_is_refused(make_tar, output_dir, outside_dir):
    data = make_tar(
        [
            {"name": "evil", "type": "symlink", "linkname": str(outside_dir)},
            {"name": "evil/pwned", "data": b"pwned"},
        ]
    )

    with pytest.raises(SymlinkWriteRefusedError):
        run(extract(data, output_dir))

    assert not (outside_dir / "pwned").exists()


def test_symlink_attack_across_two_extractions(make_tar, output_dir, outside_dir):
    run(extract(make_tar([{"name": "evil", "type": "symlink", "linkname": str(outside_dir)}]), output_dir))

    with pytest.raises(PathEscapeError):
        run(extract(make_tar([{"name": "evil/pwned", "data": b"pwned"}]), output_dir))

    assert not (outside_dir / "pwned").exists()


def test_map_cannot_smuggle_escape(make_tar, tmp_path, output_dir):
    def redirect(entry):
        entry.path = "../escape.txt"
        return entry

    with pytest.raises(PathEscapeError):
        run(extract(make_tar([{"name": "safe.txt", "data": b"x"}]), output_dir, map=redirect))
    assert not (tmp_path / "escape.txt").exists()


def test_strip(make_tar, output_dir):
    data = make_tar(
        [
            {"name": "top", "type": "dir"},
            {"name": "top/inner", "type": "dir"},
            {"name": "top/inner/file.txt", "data": b"deep"},
            {"name": "top/other.txt", "data": b"shallow"},
        ]
    )
    entries = run(extract(data, output_dir, strip=1))

    assert [entry.path for entry in entries] == ["inner", "inner/file.txt", "other.txt"]
    assert (output_dir / "inner" / "file.txt").read_bytes() == b"deep"
    assert (output_dir / "other.txt").read_bytes() == b"shallow"
    assert not (output_dir / "top").exists()


def test_extracting_twice_overwrites(make_tar, output_dir):
    data = make_tar(
        TREE
        + [
            {"name": "a/hard", "type": "link", "linkname": "a/b/c.txt"},
            {"name": "a/soft", "type": "symlink", "linkname": "b/c.txt"},
        ]
    )
    run(extract(data, output_dir))
    (output_dir / "a" / "run.sh").write_bytes(b"tampered")

    run(extract(data, output_dir))

    assert (output_dir / "a" / "run.sh").read_bytes() == b"#!/bin/sh\n"
    assert (output_dir / "a" / "b" / "c.txt").read_bytes() == b"content of c"
    assert (output_dir / "a" / "soft").read_bytes() == b"content of c"


def test_filter_and_map(make_tar, output_dir):
    data = make_tar(
        [
            {"name": "skip.txt", "data": b"skip", "mode": 0o600},
            {"name": "keep.txt", "data": b"keep", "mode": 0o600},
            {"name": "exec.sh", "data": b"run", "mode": 0o700},
        ]
    )

    def normalize(entry):
        entry.mode = 0o644
        return entry

    options = ExtractOptions(filter=lambda e: e.path != "skip.txt", map=normalize)
    entries = run(extract(data, output_dir, options))

    assert [entry.path for entry in entries] == ["keep.txt", "exec.sh"]
    assert all(entry.mode == 0o644 for entry in entries)
    assert not (output_dir / "skip.txt").exists()
    assert stat.S_IMODE((output_dir / "exec.sh").stat().st_mode) == 0o644 & ~current_umask()


def test_dry_run_writes_nothing(make_tar, tmp_path):
    before = set(tmp_path.iterdir())
    entries = run(extract(make_tar(TREE), strip=1))

    assert [entry.path for entry in entries] == ["b", "b/c.txt", "run.sh"]
    assert entries[1].data == b"content of c"
    assert set(tmp_path.iterdir()) == before


@pytest.mark.parametrize("output", [ExtractOptions(strip=1), ""])
def test_options_or_empty_output_mean_dry_run(make_tar, monkeypatch, output):
    monkeypatch.setattr(
        sys.modules["safe_decompress.extract"],
        "materialize",
        lambda *args: pytest.fail("nothing should be written"),
    )

    entries = run(extract(make_tar(TREE), output))

    expected = ["b", "b/c.txt", "run.sh"] if output else ["a", "a/b", "a/b/c.txt", "a/run.sh"]
    assert [entry.path for entry in entries] == expected


def test_options_given_twice_rejected(make_tar):
    with pytest.raises(InvalidInputError):
        run(extract(make_tar(TREE), ExtractOptions(), ExtractOptions()))


@pytest.mark.parametrize("source", [None, 42, 3.5, ["a.tar"], {"path": "a.tar"}])
def test_invalid_input(source):
    with pytest.raises(InvalidInputError):
        run(extract(source, "unused"))
    with pytest.raises(TypeError):
        run(extract(source))


def test_invalid_input_checked_before_io(monkeypatch, output_dir):
    monkeypatch.setattr(
        sys.modules["safe_decompress.extract"],
        "read_input",
        lambda source: pytest.fail("input should not be read"),
    )
    with pytest.raises(InvalidInputError):
        run(extract(object(), output_dir))
    assert not output_dir.exists()


def test_missing_input_file_raises_os_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        run(extract(str(tmp_path / "missing.tar")))


def test_decode_error_propagates(output_dir):
    with pytest.raises(DecodeError):
        run(extract(b"PK\x03\x04" + b"\x00" * 64, output_dir))
    assert not output_dir.exists()


def test_unknown_format_extracts_nothing(output_dir):
    assert run(extract(b"plain text, not an archive", output_dir)) == []


def test_plugins_are_concatenated_in_order(static_plugin):
    first = static_plugin([Entry(path="one", type=EntryType.FILE)])
    second = static_plugin([Entry(path="two", type=EntryType.FILE)])
    empty = static_plugin([])

    entries = run(extract(b"data", plugins=[first, empty, second]))

    assert [entry.path for entry in entries] == ["one", "two"]
    assert first.calls == second.calls == empty.calls == 1


def test_async_plugin_supported():
    async def plugin(data, options):
        return [Entry(path=data.decode(), type=EntryType.DIRECTORY)]

    entries = run(extract(b"from-async", plugins=[plugin]))
    assert entries[0].path == "from-async"


def test_custom_archive_plugin_subclass():
    class MagicPlugin(ArchivePlugin):
        name = "magic"
        signature = b"MAGIC"

        def decode(self, data):
            return [Entry(path=data[5:].decode(), type=EntryType.FILE, data=b"")]

    assert run(extract(b"MAGICfile.txt", plugins=[MagicPlugin()]))[0].path == "file.txt"
    assert run(extract(b"other", plugins=[MagicPlugin()])) == []


def test_plugin_error_aborts_before_writes(output_dir):
    def broken(data, options):
        raise DecodeError("bad stream")

    with pytest.raises(DecodeError, match="bad stream"):
        run(extract(b"x", output_dir, plugins=[broken]))
    assert not output_dir.exists()


def test_many_entries_share_new_ancestors(static_plugin, output_dir):
    entries = [Entry(path=f"deep/nested/dir/file{i}.txt", type=EntryType.FILE, data=b"%d" % i) for i in range(40)]
    run(extract(b"x", output_dir, plugins=[static_plugin(entries)]))

    created = sorted(os.listdir(output_dir / "deep" / "nested" / "dir"))
    assert len(created) == 40
    assert (output_dir / "deep" / "nested" / "dir" / "file7.txt").read_bytes() == b"7"


def test_extract_sync(make_tar, output_dir):
    entries = extract_sync(make_tar(TREE), output_dir, ExtractOptions(strip=1))
    assert (output_dir / "b" / "c.txt").read_bytes() == b"content of c"
    assert len(entries) == 3


def test_symlinks_as_hardlinks_option(make_tar, output_dir):
    data = make_tar(
        [
            {"name": "real.txt", "data": b"real"},
            {"name": "alias.txt", "type": "symlink", "linkname": "real.txt"},
        ]
    )
    run(extract(data, output_dir, symlinks_as_hardlinks=True))

    assert not (output_dir / "alias.txt").is_symlink()
    assert os.path.samefile(output_dir / "alias.txt", output_dir / "real.txt")
