"""Tests for the addrgen CLI commands."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from addrgen.cli.app import app
from addrgen.models.identity import Address, GeneratedUser
from addrgen.store import build_history_store

runner = CliRunner()


@pytest.fixture()
def patched_session(monkeypatch, make_session):
    """Make ``addrgen generate`` use the fake upstream APIs."""
    calls: list[dict] = []

    def _build(**kwargs):
        calls.append(kwargs)
        return make_session(with_mail=bool(kwargs.get("with_mail")))

    monkeypatch.setattr("addrgen.cli.generate_cmd.build_session", _build)
    return calls


@pytest.fixture()
def patched_mail(monkeypatch, upstream):
    """Make ``addrgen mail`` commands talk to the fake mail service."""
    from addrgen.sources.temp_mail import TempMailClient

    monkeypatch.setattr("addrgen.cli.mail_cmd.TempMailClient", lambda: TempMailClient(client=upstream.client()))
    return upstream


def _seed_history(count: int = 2) -> list[str]:
    store = build_history_store()
    ids = []
    for i in range(count):
        record = store.add(
            user=GeneratedUser(full_name=f"Person {i}"),
            address=Address(street="Main St", city="Springfield", country="United States"),
            ip=f"1.1.1.{i}",
        )
        ids.append(record.id)
    return ids


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "addrgen" in result.output

    def test_no_command_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "generate" in result.output


class TestGenerate:
    def test_own_ip(self, patched_session, history_store):
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0, result.output
        assert "Jane Doe" in result.output
        assert "Saved to history" in result.output
        assert history_store.count() == 1
        assert patched_session[0]["with_mail"] is False

    def test_typed_ip_json(self, patched_session, history_store):
        result = runner.invoke(app, ["generate", "--ip", "1.1.1.1", "--json", "--nat", "GB"])
        assert result.exit_code == 0, result.output
        assert '"full_name": "Jane Doe"' in result.output
        assert history_store.list_records()[0].ip == "1.1.1.1"
        assert patched_session[0]["nationality"] == "GB"

    def test_address_selection(self, patched_session, history_store):
        result = runner.invoke(app, ["generate", "--address", "United States|New York|"])
        assert result.exit_code == 0, result.output
        assert history_store.list_records()[0].ip == "United States|New York|"

    def test_empty_selection_fails(self, patched_session):
        result = runner.invoke(app, ["generate", "--address", ""])
        assert result.exit_code == 1
        assert "请选择地址" in result.output

    def test_lookup_failure(self, patched_session):
        result = runner.invoke(app, ["generate", "--ip", "10.0.0.1"])
        assert result.exit_code == 1
        assert "获取地址失败" in result.output

    def test_ip_and_address_conflict(self, patched_session):
        result = runner.invoke(app, ["generate", "--ip", "1.1.1.1", "--address", "Japan"])
        assert result.exit_code == 2
        assert patched_session == []


class TestHistoryCommands:
    def test_list_empty(self):
        result = runner.invoke(app, ["history", "list"])
        assert result.exit_code == 0
        assert "History is empty" in result.output

    def test_list_json(self):
        ids = _seed_history()
        result = runner.invoke(app, ["history", "list", "--json"])
        assert result.exit_code == 0
        assert ids[0] in result.output and ids[1] in result.output

    def test_show_by_prefix(self):
        ids = _seed_history(1)
        result = runner.invoke(app, ["history", "show", ids[0][:8]])
        assert result.exit_code == 0, result.output
        assert "Person 0" in result.output

    def test_show_unknown(self):
        result = runner.invoke(app, ["history", "show", "nope"])
        assert result.exit_code == 1

    def test_delete(self):
        ids = _seed_history()
        result = runner.invoke(app, ["history", "delete", ids[1]])
        assert result.exit_code == 0
        assert [r.id for r in build_history_store().list_records()] == [ids[0]]

    def test_clear(self):
        _seed_history(3)
        result = runner.invoke(app, ["history", "clear", "--yes"])
        assert result.exit_code == 0
        assert "Deleted 3 record(s)" in result.output
        assert build_history_store().count() == 0

    def test_clear_needs_confirmation(self):
        _seed_history(1)
        result = runner.invoke(app, ["history", "clear"], input="n\n")
        assert result.exit_code == 1
        assert build_history_store().count() == 1


class TestMailCommands:
    def test_inbox_without_mailbox(self):
        result = runner.invoke(app, ["mail", "inbox"])
        assert result.exit_code == 1
        assert "No mailbox yet" in result.output

    def test_new_then_read(self, patched_mail):
        result = runner.invoke(app, ["mail", "new"])
        assert result.exit_code == 0, result.output
        assert "@mail.test" in result.output

        patched_mail.add_message("m1", "Welcome")
        result = runner.invoke(app, ["mail", "inbox"])
        assert result.exit_code == 0, result.output
        assert "Welcome" in result.output

        result = runner.invoke(app, ["mail", "read", "m1"])
        assert result.exit_code == 0, result.output
        assert "Body of Welcome" in result.output

    def test_watch_prints_new_messages(self, patched_mail):
        runner.invoke(app, ["mail", "new"])
        patched_mail.add_message("m1", "Verify your account")
        result = runner.invoke(app, ["mail", "watch", "--count", "1"])
        assert result.exit_code == 0, result.output
        assert "新邮件" in result.output
        assert "Verify your account" in result.output

    def test_new_when_service_down(self, patched_mail):
        patched_mail.mail_status = 500
        result = runner.invoke(app, ["mail", "new"])
        assert result.exit_code == 1


class TestSettingsCommands:
    def test_show(self):
        result = runner.invoke(app, ["settings", "show"])
        assert result.exit_code == 0
        assert "nominatim" in result.output

    def test_validate(self):
        result = runner.invoke(app, ["settings", "validate"])
        assert result.exit_code == 0
        assert "Settings are valid" in result.output
