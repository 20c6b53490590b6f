# tests/test_response_parsing.py
"""Tests for extracting commands from AI responses."""
import pytest

from clai.ai.parser import extract_commands, parse_multiple_commands, strip_code_fences
from clai.ai.types import CommandSet
from clai.errors import EmptyResponseError


def test_fenced_single_command():
    assert extract_commands("```bash\nls -la\n```", False) == ["ls -la"]


def test_fence_without_language():
    assert extract_commands("```\ndf -h\n```", False) == ["df -h"]


def test_single_line_fence():
    assert strip_code_fences("```sh du -sh .```") == "du -sh ."


def test_unclosed_fence_is_left_alone():
    text = "```bash\nls -la"
    assert strip_code_fences(text) == text


def test_plain_text_is_trimmed():
    assert extract_commands("   ls -la  \n", False) == ["ls -la"]


def test_commands_object_filters_blanks():
    assert extract_commands('{"commands":["a","","b"]}', True) == ["a", "b"]


def test_commands_object_drops_non_strings_and_trims():
    assert extract_commands('{"commands": [" ls ", 3, null, "pwd"]}', True) == ["ls", "pwd"]


def test_bare_array():
    assert extract_commands('["ls", "ls -la"]', True) == ["ls", "ls -la"]


def test_fenced_json_object():
    response = '```json\n{"commands": ["find . -name \'*.py\'", "fd -e py"]}\n```'
    assert extract_commands(response, True) == ["find . -name '*.py'", "fd -e py"]


def test_object_embedded_in_prose():
    response = 'Here you go: {"commands": ["ls", "ls -a"]} hope that helps'
    assert extract_commands(response, True) == ["ls", "ls -a"]


def test_array_embedded_in_prose():
    response = 'Options: ["git log", "git log --oneline"] enjoy'
    assert parse_multiple_commands(response) == ["git log", "git log --oneline"]


def test_no_structure_falls_back_to_single_command():
    assert extract_commands("no structure at all", True) == ["no structure at all"]


def test_empty_command_list_falls_back_to_text():
    response = '{"commands": ["", "  "]}'
    assert extract_commands(response, True) == [response]


def test_json_is_not_parsed_for_single_command():
    response = '{"commands": ["ls"]}'
    assert extract_commands(response, False) == [response]


@pytest.mark.parametrize("content", ["", "   \n\t", "```\n```"])
def test_empty_responses_raise(content):
    with pytest.raises(EmptyResponseError):
        extract_commands(content, True)


def test_command_set_truncates_to_ten():
    candidates = [f"echo {i}" for i in range(15)]
    command_set = CommandSet.from_candidates(candidates)
    assert len(command_set) == 10
    assert command_set.primary == "echo 0"
    assert command_set[9] == "echo 9"


def test_command_set_rejects_empty():
    with pytest.raises(ValueError):
        CommandSet(commands=[])


@pytest.mark.parametrize("content, expected", [
    ("```ls -la```", "ls -la"),
    ("```ls```", "ls"),
    ("```rm -rf build```", "rm -rf build"),
    ("```bash git status```", "git status"),
])
def test_single_line_fence_keeps_command_name(content, expected):
    assert extract_commands(content, False) == [expected]


def test_deeply_nested_json_falls_back_to_text():
    content = "[" * 100000 + "]" * 100000
    assert extract_commands(content, True) == [content]
