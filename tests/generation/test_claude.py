"""Tests for the claude CLI wrapper: stream parsing, invocation, path lookup."""

from __future__ import annotations

import asyncio
import json

import pytest

from commit_resume.errors import GenerationError, ProcessError
from commit_resume.generation.claude import (
    ClaudeGenerator,
    extract_text,
    find_claude_path,
    strip_code_fence,
)
from commit_resume.utils.process import ProcessResult


def _stream(*messages: dict) -> str:
    return "\n".join(json.dumps(m) for m in messages) + "\n"


def _assistant(*texts: str) -> dict:
    return {
        "type": "assistant",
        "message": {"content": [{"type": "text", "text": t} for t in texts]},
    }


class _ScriptedRunner:
    def __init__(self, stdout: str = "", error: Exception | None = None) -> None:
        self.stdout = stdout
        self.error = error
        self.calls = []

    async def run_async(self, cmd, cwd=None, timeout=None, max_output=None):
        self.calls.append((cmd, cwd, timeout))
        if self.error is not None:
            raise self.error
        return ProcessResult(stdout=self.stdout)


# -- Stream parsing --


class TestExtractText:
    def test_first_non_empty_assistant_text(self):
        stream = _stream(
            {"type": "system", "subtype": "init"},
            _assistant("   "),
            _assistant("- [api] Built the API"),
            _assistant("ignored later text"),
            {"type": "result", "is_error": False, "result": "- [api] Built the API"},
        )

        assert extract_text(stream) == "- [api] Built the API"

    def test_skips_non_text_blocks(self):
        message = {
            "type": "assistant",
            "message": {"content": [
                {"type": "tool_use", "name": "Read"},
                {"type": "text", "text": "answer"},
            ]},
        }

        assert extract_text(_stream(message)) == "answer"

    def test_string_content(self):
        message = {"type": "assistant", "message": {"content": "plain"}}
        assert extract_text(_stream(message)) == "plain"

    def test_non_json_lines_ignored(self):
        stream = "warming up...\n" + _stream(_assistant("ok"))
        assert extract_text(stream) == "ok"

    def test_error_result_raises(self):
        stream = _stream(
            {"type": "result", "is_error": True, "errors": ["rate limited", "try later"]},
        )

        with pytest.raises(GenerationError, match="rate limited"):
            extract_text(stream)

    def test_error_result_without_details(self):
        with pytest.raises(GenerationError, match="unknown error"):
            extract_text(_stream({"type": "result", "is_error": True}))

    def test_no_assistant_text(self):
        assert extract_text(_stream({"type": "result", "is_error": False})) == ""

    def test_debug_env_does_not_change_result(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        assert extract_text(_stream(_assistant("text"))) == "text"


class TestStripCodeFence:
    @pytest.mark.parametrize("raw", [
        "```markdown\n# Resume\n```",
        "```md\n# Resume\n```",
        "```\n# Resume\n```",
        "  # Resume  ",
    ])
    def test_fences_removed(self, raw):
        assert strip_code_fence(raw) == "# Resume"

    def test_inner_fences_kept(self):
        text = "# Title\n```\ncode\n```\nafter"
        assert strip_code_fence(text) == text


# -- Invocation --


class TestClaudeGenerator:
    def test_command_shape(self):
        cmd = ClaudeGenerator("/usr/bin/claude").command("hello")
        assert cmd[:3] == ["/usr/bin/claude", "-p", "hello"]
        assert cmd[cmd.index("--output-format") + 1] == "stream-json"
        assert "--verbose" in cmd
        assert cmd[cmd.index("--max-turns") + 1] == "1"
        assert cmd[cmd.index("--permission-mode") + 1] == "bypassPermissions"

    def test_generate_returns_clean_text(self, tmp_path):
        runner = _ScriptedRunner(_stream(_assistant("```markdown\n- [api] Work\n```")))
        gen = ClaudeGenerator("claude", runner=runner, timeout=42)

        text = asyncio.run(gen.generate("prompt", tmp_path))

        assert text == "- [api] Work"
        cmd, cwd, timeout = runner.calls[0]
        assert cmd[2] == "prompt"
        assert cwd == tmp_path
        assert timeout == 42

    def test_process_failure_is_generation_error(self, tmp_path):
        runner = _ScriptedRunner(error=ProcessError(["claude"], "timed out after 600s"))
        gen = ClaudeGenerator("claude", runner=runner)

        with pytest.raises(GenerationError, match="timed out"):
            asyncio.run(gen.generate("prompt", tmp_path))

    def test_empty_response_is_generation_error(self, tmp_path):
        gen = ClaudeGenerator("claude", runner=_ScriptedRunner(_stream({"type": "result"})))

        with pytest.raises(GenerationError, match="empty"):
            asyncio.run(gen.generate("prompt", tmp_path))


# -- Path lookup --


class _ShellRunner:
    def __init__(self, answer: str | None) -> None:
        self.answer = answer
        self.calls = []

    def run_sync(self, cmd, cwd=None, timeout=None):
        self.calls.append(cmd)
        return self.answer


@pytest.fixture
def no_claude(monkeypatch):
    """Hide every claude install the lookup would otherwise find."""
    monkeypatch.setattr("commit_resume.generation.claude.shutil.which", lambda name: None)
    monkeypatch.setattr("commit_resume.generation.claude.claude_static_candidates", lambda: [])
    monkeypatch.setattr("commit_resume.generation.claude.claude_version_manager_candidates", lambda: [])


class TestFindClaudePath:
    def test_configured_path_wins(self, tmp_path, monkeypatch):
        binary = tmp_path / "claude"
        binary.write_text("")
        monkeypatch.setattr("commit_resume.generation.claude.shutil.which", lambda name: "/elsewhere/claude")

        assert find_claude_path(str(binary)) == str(binary)

    def test_configured_path_missing(self, tmp_path):
        assert find_claude_path(str(tmp_path / "nope")) is None

    def test_which(self, monkeypatch):
        monkeypatch.setattr("commit_resume.generation.claude.shutil.which", lambda name: "/usr/bin/claude")
        assert find_claude_path() == "/usr/bin/claude"

    def test_static_candidate(self, tmp_path, monkeypatch, no_claude):
        binary = tmp_path / "claude"
        binary.write_text("")
        monkeypatch.setattr(
            "commit_resume.generation.claude.claude_static_candidates",
            lambda: [tmp_path / "missing", binary],
        )

        assert find_claude_path(runner=_ShellRunner(None)) == str(binary)

    def test_login_shell_fallback(self, no_claude):
        runner = _ShellRunner("/home/me/.nvm/versions/node/v20/bin/claude\n")

        found = find_claude_path(runner=runner)

        assert found == "/home/me/.nvm/versions/node/v20/bin/claude"
        assert runner.calls[0][1:] == ["-lc", "command -v claude"]

    def test_not_found(self, no_claude):
        assert find_claude_path(runner=_ShellRunner(None)) is None
