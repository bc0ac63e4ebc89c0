"""Tests for the netcheck command line."""

from click.testing import CliRunner

from netcheck import __version__, cli
from netcheck.models import Step
from netcheck.output import load_trace_log
from netcheck.scheduler import PhaseScheduler

from .conftest import FakeProber


def test_help():
    result = CliRunner().invoke(cli.main, ['--help'])

    assert result.exit_code == 0
    assert 'TARGET' in result.output
    assert '--json' in result.output


def test_version():
    result = CliRunner().invoke(cli.main, ['--version'])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_invalid_target_exits_with_usage_error():
    result = CliRunner().invoke(cli.main, ['https://'])

    assert result.exit_code == 2


def test_invalid_samples():
    result = CliRunner().invoke(cli.main, ['example.com', '--samples', '0'])

    assert result.exit_code == 2


def test_full_run_with_json(tmp_path, monkeypatch):
    captured = {}

    async def fake_run(target, config, sink):
        captured['config'] = config
        return await PhaseScheduler(FakeProber(), sink=sink, config=config).run(target)

    monkeypatch.setattr(cli, 'run_diagnostic', fake_run)
    json_path = tmp_path / 'report.json'

    result = CliRunner().invoke(cli.main, [
        'example.com', '--samples', '3', '--timeout', '5', '--json', str(json_path),
    ])

    assert result.exit_code == 0, result.output
    assert captured['config'].stability_samples == 3
    assert captured['config'].probe_timeout == 5.0
    assert json_path.exists()

    entries = load_trace_log(json_path)
    assert entries
    assert any(e.category == Step.RESOLUTION and e.message.startswith("Found") for e in entries)


def test_interrupt_exits_130(monkeypatch):
    def interrupted(target, config, sink):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, 'run_diagnostic', interrupted)

    result = CliRunner().invoke(cli.main, ['example.com'])

    assert result.exit_code == 130
    assert 'Error:' in result.output
    assert 'Interrupted' in result.output
