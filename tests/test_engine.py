"""Tests for rendering full templates."""

import re

import pytest

from envvibe import NoAvailablePort, PortRange, render
from envvibe.ports import allocator
from envvibe.rendering.engine import render_file


def _port(value):
    assert re.fullmatch(r"\d+", value), value
    return int(value)


def test_no_placeholders_returns_content_unchanged():
    content = "HOST=localhost\nPORT=3000\nDEBUG=true"

    result = render(content, "main")

    assert result.processed_content == content
    assert result.assigned_ports == {}


def test_auto_port_replacement(default_range):
    result = render("WEB_PORT={{ auto_port() }}", "main")

    assert "{{" not in result.processed_content
    assert "auto_port" not in result.processed_content
    assert list(result.assigned_ports) == ["WEB_PORT"]

    port = result.assigned_ports["WEB_PORT"]
    assert port in default_range
    assert result.processed_content == f"WEB_PORT={port}"


def test_auto_port_default_is_ignored(monkeypatch, always_available):
    draws = iter([8080, 9090])
    monkeypatch.setattr(allocator.random, "randint", lambda low, high: next(draws))

    result = render("PORT={{ auto_port() | 8080 }}", used_ports={8080})

    assert result.processed_content == "PORT=9090"
    assert result.assigned_ports == {"PORT": 9090}


def test_multiple_lines_get_distinct_ports(default_range):
    content = "WEB_PORT={{ auto_port() }}\nAPI_PORT={{ auto_port() }}\nDB_PORT={{ auto_port() }}"

    result = render(content, "", set(), default_range)

    lines = result.processed_content.split("\n")
    assert len(lines) == 3
    for line, name in zip(lines, ["WEB_PORT", "API_PORT", "DB_PORT"]):
        key, value = line.split("=", 1)
        assert key == name
        assert _port(value) == result.assigned_ports[name]

    assert set(result.assigned_ports) == {"WEB_PORT", "API_PORT", "DB_PORT"}
    ports = list(result.assigned_ports.values())
    assert len(set(ports)) == 3
    assert all(1024 <= port <= 65535 for port in ports)


def test_ports_unique_within_small_range(always_available):
    content = "\n".join(f"P{i}={{{{ auto_port() }}}}" for i in range(5))

    result = render(content, port_range=PortRange(low=7000, high=7004))

    assert sorted(result.assigned_ports.values()) == [7000, 7001, 7002, 7003, 7004]


def test_multiple_ports_on_one_line(always_available):
    result = render("PORTS={{ auto_port() }},{{ auto_port() }}")

    value = result.processed_content.split("=", 1)[1]
    first, second = (_port(part) for part in value.split(","))
    assert first != second
    assert list(result.assigned_ports) == ["PORTS"]
    assert result.assigned_ports["PORTS"] == second


def test_used_ports_are_never_assigned(always_available):
    port_range = PortRange(low=8000, high=8009)
    used = {8000, 8001, 8002, 8003, 8004, 8005, 8006}

    result = render("A={{ auto_port() }}\nB={{ auto_port() }}", used_ports=used, port_range=port_range)

    assert not set(result.assigned_ports.values()) & used
    assert len(set(result.assigned_ports.values())) == 2


def test_repeated_variable_name_keeps_last_assignment(always_available):
    result = render("PORT={{ auto_port() }}\nPORT={{ auto_port() }}")

    second_line = result.processed_content.split("\n")[1]
    assert result.assigned_ports == {"PORT": int(second_line.split("=")[1])}


def test_port_without_variable_name_not_recorded(always_available):
    result = render("# listen on {{ auto_port() }}")

    assert result.assigned_ports == {}
    assert re.fullmatch(r"# listen on \d+", result.processed_content)


class TestBranch:
    def test_branch_replacement(self):
        result = render("BRANCH={{ branch() }}", "vk/feature-branch")

        assert result.processed_content == "BRANCH=vk/feature-branch"
        assert result.assigned_ports == {}

    def test_branch_with_default_uses_branch(self):
        result = render("ENV={{ branch() | anything }}", "feature/login")

        assert result.processed_content == "ENV=feature/login"

    def test_branch_with_default_uses_default(self):
        result = render("ENV={{ branch() | production }}", "")

        assert result.processed_content == "ENV=production"

    def test_branch_without_default_keeps_placeholder(self):
        result = render("ENV={{ branch() }}", "")

        assert result.processed_content == "ENV={{ branch() }}"


def test_mixed_placeholders_on_one_line(always_available):
    result = render("URL=http://{{ branch() | dev }}.local:{{ auto_port() }}", "")

    port = result.assigned_ports["URL"]
    assert result.processed_content == f"URL=http://dev.local:{port}"


def test_preserves_comments_and_empty_lines():
    content = "# This is a comment\n\nPORT={{ auto_port() }}\n# Another comment\n"

    result = render(content, "main")

    lines = result.processed_content.split("\n")
    assert len(lines) == 5
    assert lines[0] == "# This is a comment"
    assert lines[1] == ""
    assert lines[2].startswith("PORT=")
    assert lines[3] == "# Another comment"
    assert lines[4] == ""


def test_exhaustion_fails_whole_render(always_available):
    content = "A={{ auto_port() }}\nB={{ auto_port() }}"

    with pytest.raises(NoAvailablePort):
        render(content, port_range=PortRange(low=9000, high=9000))


def test_render_file_writes_output(tmp_path, always_available):
    template = tmp_path / ".env.vibe"
    template.write_text("WEB_PORT={{ auto_port() }}\nBRANCH={{ branch() }}\n")
    output = tmp_path / "out" / ".env"

    result = render_file(template, output, branch_name="main", file_mode=0o600)

    assert output.read_text() == result.processed_content
    assert result.processed_content.endswith("BRANCH=main\n")
    assert (output.stat().st_mode & 0o777) == 0o600


def test_render_file_writes_nothing_on_failure(tmp_path, always_available):
    template = tmp_path / ".env.vibe"
    template.write_text("A={{ auto_port() }}")
    output = tmp_path / ".env"

    with pytest.raises(NoAvailablePort):
        render_file(template, output, used_ports={9100}, port_range=PortRange(low=9100, high=9100))

    assert not output.exists()


def test_render_file_missing_template(tmp_path):
    with pytest.raises(FileNotFoundError):
        render_file(tmp_path / "missing", tmp_path / ".env")
