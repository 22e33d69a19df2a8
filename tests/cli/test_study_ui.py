"""
Unit tests for the flashdeck.cli.study_ui module.
"""

import re
from unittest.mock import patch

import pytest

from flashdeck.cli.study_ui import parse_command, start_study_flow
from flashdeck.study_session import StudyIntent, StudySession


def normalize_output(text: str) -> str:
    """Strip ANSI codes and collapse whitespace so wrapped lines compare."""
    text = re.sub(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])", "", text)
    return re.sub(r"\s+", " ", text).strip()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", StudyIntent.FLIP),
        (" ", StudyIntent.FLIP),
        ("f", StudyIntent.FLIP),
        ("space", StudyIntent.FLIP),
        ("N", StudyIntent.NEXT),
        (" right ", StudyIntent.NEXT),
        ("p", StudyIntent.PREVIOUS),
        ("left", StudyIntent.PREVIOUS),
        ("c", StudyIntent.MARK_CORRECT),
        ("x", StudyIntent.MARK_INCORRECT),
        ("s", StudyIntent.SHUFFLE),
        ("r", StudyIntent.RESTART),
        ("zzz", None),
    ],
)
def test_parse_command(raw, expected):
    assert parse_command(raw) is expected


def test_start_study_flow_empty_deck(sample_deck, capsys):
    session = StudySession(sample_deck, [])

    with patch("rich.console.Console.input") as mock_input:
        start_study_flow(session)

    output = normalize_output(capsys.readouterr().out)
    assert "Spanish Basics" in output
    assert "This deck has no cards to study." in output
    assert "Study session finished." not in output
    mock_input.assert_not_called()


def test_start_study_flow_walks_to_the_end(sample_deck, greeting_cards, capsys):
    session = StudySession(sample_deck, greeting_cards)

    # flip, correct, flip the last card, miss it, quit
    with patch("rich.console.Console.input", side_effect=["", "c", "", "x", "q"]):
        start_study_flow(session)

    output = normalize_output(capsys.readouterr().out)
    assert "Progress 1 / 2" in output
    assert "Hello" in output
    assert "Hola" in output
    assert "Adiós" in output
    assert "You've reached the end of this deck!" in output
    assert "Study session finished. Correct: 1, Incorrect: 1" in output
    assert session.correct_count == 1
    assert session.incorrect_count == 1


def test_start_study_flow_requires_flip_before_marking(
    sample_deck, greeting_cards, capsys
):
    session = StudySession(sample_deck, greeting_cards)

    with patch("rich.console.Console.input", side_effect=["c", "quit"]):
        start_study_flow(session)

    output = normalize_output(capsys.readouterr().out)
    assert "Flip the card before marking an answer." in output
    assert session.correct_count == 0
    assert session.cursor == 0


def test_start_study_flow_unknown_command(sample_deck, greeting_cards, capsys):
    session = StudySession(sample_deck, greeting_cards)

    with patch("rich.console.Console.input", side_effect=["jump", "exit"]):
        start_study_flow(session)

    output = normalize_output(capsys.readouterr().out)
    assert "Unknown command: jump" in output
    assert "Study session finished. Correct: 0, Incorrect: 0" in output


def test_start_study_flow_unsubscribes_on_exit(sample_deck, greeting_cards):
    session = StudySession(sample_deck, greeting_cards)

    with patch("rich.console.Console.input", side_effect=["q"]):
        start_study_flow(session)

    assert session._listeners == []


def test_start_study_flow_restart_clears_counts(
    sample_deck, greeting_cards, capsys
):
    session = StudySession(sample_deck, greeting_cards)

    with patch(
        "rich.console.Console.input", side_effect=["", "c", "r", "q"]
    ):
        start_study_flow(session)

    assert session.cursor == 0
    assert session.correct_count == 0
    output = normalize_output(capsys.readouterr().out)
    assert "Study session finished. Correct: 0, Incorrect: 0" in output
