"""Tests for scratch setup, hiera upload, and streamed execution."""

from __future__ import annotations

import pytest

from fakes import FakeComm
from guestprov.errors import BadExitStatusError
from guestprov.executor import (
    RunOptions,
    prepare_scratch_dir,
    run_command,
    upload_hiera_config,
)
from guestprov.remote import RecordedCommand
from guestprov.ui import ListSink


def test_prepare_scratch_dir_creates_then_opens_permissions() -> None:
    comm = FakeComm()
    prepare_scratch_dir(comm, '/tmp/vagrant-puppet')
    assert comm.calls == [
        ('sudo', 'mkdir -p /tmp/vagrant-puppet'),
        ('sudo', 'chmod 0777 /tmp/vagrant-puppet'),
    ]


def test_upload_hiera_config_targets_temp_dir() -> None:
    comm = FakeComm()
    guest = upload_hiera_config(comm, '/host/hiera.yaml', '/tmp/vp')
    assert guest == '/tmp/vp/hiera.yaml'
    assert comm.calls == [('upload', '/host/hiera.yaml', '/tmp/vp/hiera.yaml')]


@pytest.mark.parametrize('code', [0, 2])
def test_good_exit_codes_succeed(code: int) -> None:
    comm = FakeComm(returncode=code)
    assert run_command(comm, 'puppet apply', RunOptions(), ListSink()) == code


def test_bad_exit_code_raises() -> None:
    comm = FakeComm(returncode=1)
    with pytest.raises(BadExitStatusError) as exc:
        run_command(comm, 'puppet apply', RunOptions(), ListSink())
    assert exc.value.exit_code == 1
    assert exc.value.muted is True
    assert 'shown above' not in str(exc.value)


def test_unmuted_message_mentions_output() -> None:
    comm = FakeComm(returncode=4)
    with pytest.raises(BadExitStatusError, match='shown above'):
        run_command(comm, 'x', RunOptions(muted=False), ListSink())


def test_output_trimmed_and_empty_lines_dropped() -> None:
    lines = ['Notice: one  \n', '\n', '   \n', 'Notice: two\r\n', 'done']
    comm = FakeComm(lines=lines, returncode=2)
    sink = ListSink()
    run_command(comm, 'puppet apply', RunOptions(), sink)
    assert sink.messages == ['Notice: one', 'Notice: two', 'done']


def test_run_is_privileged_and_elevated() -> None:
    comm = FakeComm()
    run_command(comm, 'puppet apply', RunOptions(elevated=True), ListSink())
    assert comm.calls == [('stream', 'puppet apply', True, True)]


def test_custom_good_exit_codes() -> None:
    comm = FakeComm(returncode=2)
    opts = RunOptions(good_exit_codes=frozenset({0}))
    with pytest.raises(BadExitStatusError):
        run_command(comm, 'x', opts, ListSink())


def test_recorded_command_exposes_returncode_after_iteration() -> None:
    rec = RecordedCommand(['a\n'], returncode=3)
    assert rec.returncode is None
    assert list(rec) == ['a\n']
    assert rec.returncode == 3


class ApplyFailed(BadExitStatusError):
    pass


def test_error_class_option() -> None:
    comm = FakeComm(returncode=6)
    opts = RunOptions(error_class=ApplyFailed, muted=False)
    with pytest.raises(ApplyFailed) as exc:
        run_command(comm, 'x', opts, ListSink())
    assert exc.value.exit_code == 6
    assert exc.value.muted is False
