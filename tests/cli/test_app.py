from __future__ import annotations

import json
from pathlib import Path

import pytest
from result import Ok

from nodewaste.cli import app as cli_app
from nodewaste.config.defaults import default_config


@pytest.fixture(autouse=True)
def _default_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_app, "load_config", lambda: Ok(default_config()))


def _write_package(node_modules: Path, dirname: str, manifest: dict[str, object], size: int = 0) -> None:
    pkg = node_modules / dirname
    pkg.mkdir(parents=True)
    raw = json.dumps(manifest).encode()
    (pkg / "package.json").write_bytes(raw)
    if size > len(raw):
        (pkg / "index.js").write_bytes(b"x" * (size - len(raw)))


def _workspace(tmp_path: Path) -> Path:
    root = tmp_path / "projects"
    node_modules = root / "app" / "node_modules"
    node_modules.mkdir(parents=True)
    (root / "app" / "package.json").write_text("{}")
    _write_package(node_modules, "left-pad", {"name": "left-pad", "version": "1.0.0"}, size=1024)
    _write_package(node_modules, "left-pad-fork", {"name": "left-pad", "version": "1.0.0"}, size=1024)
    return root


def test_missing_directory_exits(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run()

    assert exc_info.value.exit_code == 1
    assert "No directory given, exiting..." in capsys.readouterr().out


def test_sample_config(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(sample_config=True)

    assert exc_info.value.exit_code == 0
    assert '"dependencyDir": "node_modules"' in capsys.readouterr().out


def test_run_writes_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    report_path = tmp_path / "results.txt"
    report_path.write_text("previous run\n")

    cli_app.run(path=str(_workspace(tmp_path)), output=str(report_path))

    assert report_path.read_text() == "left-pad@1.0.0: 2 (1.0 kB -> 2.0 kB)\n"
    out = capsys.readouterr().out
    assert "found 1 projects to check" in out
    assert "processed 2 entries" in out
    assert "total space used: 2.0 kB" in out


def test_run_with_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli_app.run(path=str(_workspace(tmp_path)), output=str(tmp_path / "out.txt"), top=5, workers=2)

    out = capsys.readouterr().out
    assert "Largest Packages" in out
    assert "left-pad" in out


def test_invalid_manifest_aborts_without_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _workspace(tmp_path)
    _write_package(root / "app" / "node_modules", "broken", {"name": "broken", "version": 1})
    report_path = tmp_path / "results.txt"

    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(path=str(root), output=str(report_path))

    assert exc_info.value.exit_code == 1
    assert not report_path.exists()
    assert "'version'" in capsys.readouterr().out


def test_keep_going_reports_issues(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _workspace(tmp_path)
    _write_package(root / "app" / "node_modules", "broken", {"name": "broken", "version": 1})
    report_path = tmp_path / "results.txt"

    cli_app.run(path=str(root), output=str(report_path), keep_going=True)

    assert report_path.read_text() == "left-pad@1.0.0: 2 (1.0 kB -> 2.0 kB)\n"
    assert "could not be analyzed" in capsys.readouterr().out


def test_missing_root_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(path=str(tmp_path / "absent"), output=str(tmp_path / "results.txt"))

    assert exc_info.value.exit_code == 1
    assert "Path does not exist" in capsys.readouterr().out
