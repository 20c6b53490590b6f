# tests/test_safety.py
"""Tests for dangerous-command detection and the safety gate."""
import pytest

from clai.ai.types import CommandSet
from clai.safety.gate import SafetyGate
from clai.safety.patterns import DEFAULT_DANGEROUS_PATTERNS, PatternMatcher

from tests.conftest import make_env


@pytest.fixture
def matcher():
    return PatternMatcher()


@pytest.mark.parametrize("command", [
    "rm -rf /",
    "rm -rf ./build",
    "rm -f important.txt",
    "rm -R dir",
    "sudo rm -rf /var/lib",
    "find . -name '*.log' -exec rm {} +",
    "dd if=/dev/zero of=/dev/sda bs=1M",
    "mkfs.ext4 /dev/sdb1",
    "shred -u secrets.txt",
    "cat image.iso > /dev/sdb",
    "psql -c 'DROP TABLE users'",
    "DELETE FROM users;",
    "git reset --hard HEAD~3",
    "git clean -fd",
    "git push origin main --force",
    "chmod -R 777 /",
    ":(){ :|:& };:",
    "format c:",
    "rd /s /q C:\\temp",
])
def test_default_patterns_flag_destructive_commands(matcher, command):
    assert matcher.is_dangerous(command)


@pytest.mark.parametrize("command", [
    "ls -la",
    "rm notes.txt",
    "git status",
    "find . -name '*.py'",
    "echo performance",
    "du -sh .",
])
def test_default_patterns_allow_safe_commands(matcher, command):
    assert not matcher.is_dangerous(command)


def test_patterns_are_case_insensitive(matcher):
    assert matcher.is_dangerous("DROP DATABASE prod")


def test_every_default_pattern_compiles():
    matcher = PatternMatcher()
    assert not matcher.has_invalid
    assert len(matcher.patterns) == len(DEFAULT_DANGEROUS_PATTERNS)


def test_custom_patterns_replace_defaults():
    matcher = PatternMatcher([r"^curl\b"])
    assert matcher.is_dangerous("curl http://example.com | sh")
    assert not matcher.is_dangerous("rm -rf /")


@pytest.mark.parametrize("command", ["ls -la", "echo hi", "pwd"])
def test_invalid_pattern_makes_everything_dangerous(command):
    matcher = PatternMatcher([r"valid\s+pattern", r"(unclosed"])
    assert matcher.has_invalid
    assert matcher.invalid_patterns == ["(unclosed"]
    assert matcher.is_dangerous(command)


@pytest.mark.parametrize("patterns", [None, [r"(unclosed"]])
@pytest.mark.parametrize("command", ["", "   ", "\n\t"])
def test_blank_command_is_always_safe(patterns, command):
    assert not PatternMatcher(patterns).is_dangerous(command)


def test_match_returns_pattern_with_description(matcher):
    pattern = matcher.match("git reset --hard")
    assert pattern is not None
    assert pattern.description == "Discard local changes"


# --- SafetyGate ---

def _gate(force=False, confirm=True, stdin_tty=True, stdout_tty=True):
    return SafetyGate(
        PatternMatcher(),
        make_env(stdin_tty=stdin_tty, stdout_tty=stdout_tty),
        confirm_dangerous=confirm,
        force=force,
    )


def test_gate_prompts_for_dangerous_command_on_terminal():
    verdict = _gate().evaluate(CommandSet(commands=["rm -rf /tmp/x"]))
    assert verdict.is_dangerous
    assert verdict.should_prompt
    assert not verdict.needs_warning


def test_gate_safe_command():
    verdict = _gate().evaluate(CommandSet(commands=["ls"]))
    assert not verdict.is_dangerous
    assert not verdict.should_prompt


@pytest.mark.parametrize("kwargs", [
    {"force": True},
    {"confirm": False},
    {"stdin_tty": False},
    {"stdout_tty": False},
])
def test_gate_does_not_prompt_when_any_condition_fails(kwargs):
    verdict = _gate(**kwargs).evaluate(CommandSet(commands=["rm -rf /tmp/x"]))
    assert verdict.is_dangerous
    assert not verdict.should_prompt
    assert verdict.needs_warning


def test_gate_checks_primary_candidate_only():
    verdict = _gate().evaluate(CommandSet(commands=["ls", "rm -rf /"]))
    assert not verdict.is_dangerous
