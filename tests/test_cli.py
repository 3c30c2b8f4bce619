"""
End-to-end tests for the command surface.
"""

import asyncio

import pytest

from wk import __version__
from wk.cli import main
from wk.infra.db import DatabaseEngine, RunModel


@pytest.fixture
def cli_clock(clock, monkeypatch):
    """Drive both services from the same fake clock"""
    monkeypatch.setattr("wk.services.timer_service.epoch_now", clock)
    monkeypatch.setattr("wk.services.report_service.epoch_now", clock)
    return clock


def run(capsys, *argv):
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_track_and_report_a_day(wk_home, cli_clock, capsys):
    assert run(capsys, "add", "writing")[0] == 0
    assert run(capsys, "start", "writing")[0] == 0
    cli_clock.advance(90)
    assert run(capsys, "stop")[0] == 0

    code, out, _ = run(capsys, "info", "day")

    assert code == 0
    assert out == "Current day:\n\t1. writing: 0d 0h 1m 30s (100%)\n"


def test_info_defaults_to_day(wk_home, cli_clock, capsys):
    code, out, _ = run(capsys, "info")
    assert code == 0
    assert out == "Current day:\n"


def test_store_created_under_data_dir(wk_home, cli_clock, capsys):
    run(capsys, "list")
    assert (wk_home / "db.sqlite").exists()


def test_list_prints_id_and_name(wk_home, capsys):
    run(capsys, "add", "writing")
    run(capsys, "add", "email")

    code, out, _ = run(capsys, "list")

    assert code == 0
    assert out == "1: writing\n2: email\n"


def test_duplicate_add_fails(wk_home, capsys):
    run(capsys, "add", "writing")

    code, _, err = run(capsys, "add", "writing")

    assert code == 1
    assert "Task already exists: writing" in err


def test_empty_name_is_rejected(wk_home, capsys):
    code, _, err = run(capsys, "add", "  ")
    assert code == 2
    assert "invalid task name" in err


def test_start_unknown_task_is_not_fatal(wk_home, cli_clock, capsys):
    code, out, _ = run(capsys, "start", "ghost")

    assert code == 0
    assert out == "Task not found: ghost\n"


def test_remove_then_list(wk_home, capsys):
    run(capsys, "add", "writing")
    run(capsys, "add", "email")
    assert run(capsys, "remove", "writing")[0] == 0
    assert run(capsys, "remove", "ghost")[0] == 0

    assert run(capsys, "list")[1] == "2: email\n"


def test_status(wk_home, cli_clock, capsys):
    assert run(capsys, "status")[1] == "No task running.\n"

    run(capsys, "add", "writing")
    run(capsys, "start", "writing")
    cli_clock.advance(3725)

    assert run(capsys, "status")[1] == "Running: writing (0d 1h 2m 5s)\n"


def test_no_command_prints_help(wk_home, capsys):
    code, _, err = run(capsys)
    assert code == 2
    assert "usage: wk" in err


def test_bad_period_is_an_argument_error(wk_home, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["info", "decade"])
    assert exc_info.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == f"wk {__version__}"


def test_unusable_data_dir_aborts(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    monkeypatch.setenv("WK_DATA_DIR", str(blocker / "wk"))

    code, _, err = run(capsys, "list")

    assert code == 1
    assert "wk: error:" in err


def test_unopenable_database_url_aborts(wk_home, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("WK_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")

    code, _, err = run(capsys, "list")

    assert code == 1
    assert "Cannot open database" in err


def test_malformed_settings_file_aborts(wk_home, capsys):
    wk_home.mkdir(parents=True)
    (wk_home / "settings.yaml").write_text("log_level: [unclosed\n")

    code, _, err = run(capsys, "list")

    assert code == 1
    assert err.startswith("wk: error: Cannot read")


def test_corrupt_run_row_is_not_an_argument_error(wk_home, cli_clock, capsys):
    run(capsys, "add", "a")

    async def corrupt():
        engine = DatabaseEngine(f"sqlite+aiosqlite:///{wk_home / 'db.sqlite'}")
        try:
            async with engine.transaction() as session:
                session.add(RunModel(task_id=1, start_time=cli_clock.now - 10, end_time=cli_clock.now - 20))
        finally:
            await engine.dispose()

    asyncio.run(corrupt())

    code, _, err = run(capsys, "info")

    assert code == 1
    assert "Corrupt run row" in err
