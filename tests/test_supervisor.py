import os
import sys
import subprocess
import webbrowser

import pytest

from pictolaunch.local.console import handler
from pictolaunch.local.supervisor import browser, persistence, process_utils, startup
from conftest import FakeProc, is_alive


@pytest.fixture
def no_listeners(monkeypatch):
    monkeypatch.setattr(process_utils, "find_listening_processes", lambda port: [])


@pytest.fixture
def fake_launch(monkeypatch, spawn_sleeper):
    """Replaces the real server with idle processes that look like our server."""
    launched = []

    def _launch(manager):
        p = spawn_sleeper()
        launched.append(p)
        return p

    monkeypatch.setattr(process_utils, "launch_server", _launch)
    monkeypatch.setattr(startup, "wait_for_server_ready", lambda manager, process: 200)
    return launched


def test_stop_with_nothing_running(make_supervisor, no_listeners):
    sup = make_supervisor()
    sup.stop()
    assert not sup.pid_file_path.exists()


def test_stop_cleans_stale_pid_file(make_supervisor, no_listeners):
    sup = make_supervisor()
    persistence.write_pid_file(sup, 2 ** 22 + 17)
    sup.stop()
    assert not sup.pid_file_path.exists()


def test_start_tracks_new_server(make_supervisor, no_listeners, fake_launch):
    sup = make_supervisor()
    assert sup.start() is True
    assert sup.ready
    assert sup.server_pid == fake_launch[0].pid
    assert persistence.get_server_pid(sup) == fake_launch[0].pid
    assert sup.hypercorn_config_path.exists()


def test_second_start_replaces_first(make_supervisor, no_listeners, fake_launch):
    make_supervisor().start()
    make_supervisor().start()

    first, second = fake_launch
    assert not is_alive(first.pid)
    assert is_alive(second.pid)
    assert persistence.get_server_pid(make_supervisor()) == second.pid


def test_start_then_stop_leaves_nothing(make_supervisor, no_listeners, fake_launch):
    sup = make_supervisor()
    sup.start()
    sup.stop()
    assert not is_alive(fake_launch[0].pid)
    assert sup.get_pid_info() is None


def test_unrelated_port_holder_blocks_launch_but_not_browser(make_supervisor, monkeypatch):
    foreign = FakeProc(4321, ["node", "server.js"], name="node")
    monkeypatch.setattr(process_utils, "find_listening_processes", lambda port: [foreign])
    monkeypatch.setattr(process_utils, "launch_server", lambda manager: pytest.fail("must not launch"))
    opened = []
    monkeypatch.setattr(browser, "open_browser", lambda url, name, new_window: opened.append(url) or True)

    sup = make_supervisor(OPEN_BROWSER=True)
    assert sup.start() is False
    assert opened == [sup.url]
    assert sup.browser_opened


def test_server_exit_is_reported_and_cleaned_up(make_supervisor, no_listeners, monkeypatch, free_port):
    def crashing_server(manager):
        return subprocess.Popen([sys.executable, "-c", "import sys; sys.exit(3)"])

    monkeypatch.setattr(process_utils, "launch_server", crashing_server)
    sup = make_supervisor(READINESS_TIMEOUT=10.0, WEB_SERVER_PORT=free_port)

    assert sup.start() is False
    assert sup.server_process is None
    assert not sup.pid_file_path.exists()


def test_missing_serve_dir_skips_launch(make_supervisor, no_listeners, monkeypatch, tmp_path):
    monkeypatch.setattr(process_utils, "launch_server", lambda manager: pytest.fail("must not launch"))
    sup = make_supervisor(SERVE_DIR=tmp_path / "does-not-exist")
    assert sup.start() is False


def test_browser_failure_is_not_fatal(make_supervisor, no_listeners, fake_launch, monkeypatch):
    def broken_get(using=None):
        raise webbrowser.Error("could not locate runnable browser")

    monkeypatch.setattr(browser.webbrowser, "get", broken_get)
    sup = make_supervisor(OPEN_BROWSER=True)

    assert sup.start() is True
    assert sup.browser_opened is False


def test_urls(make_supervisor):
    sup = make_supervisor(WEB_SERVER_PORT=8000, WEB_SERVER_HOST="0.0.0.0")
    assert sup.url == "http://localhost:8000/"
    assert sup.probe_url == "http://127.0.0.1:8000/"


def test_status_when_stopped(make_supervisor, no_listeners):
    status = make_supervisor().get_status()
    assert status["pid"] is None
    assert status["running"] is False
    assert status["listeners"] == []
    assert status["http_status"] is None


def test_status_of_running_server(make_supervisor, no_listeners, fake_launch):
    sup = make_supervisor()
    sup.start()
    status = sup.get_status()
    assert status["pid"] == fake_launch[0].pid
    assert status["running"] is True
    assert status["memory_mb"] > 0


def test_status_ignores_reused_pid(make_supervisor, no_listeners, capsys):
    sup = make_supervisor()
    # The test runner itself stands in for whatever process took over the PID.
    persistence.write_pid_file(sup, os.getpid())

    status = sup.get_status()
    assert status["pid"] == os.getpid()
    assert status["pid_reused"] is True
    assert status["running"] is False
    assert status["memory_mb"] is None

    handler.display_status(sup)
    assert "unrelated process" in capsys.readouterr().out
