"""Tests for the interactive shell."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from main import build_parser, run_shell
from webrag.models.rag import GatedAnswer, RAGResponse


def _rag() -> MagicMock:
    rag = MagicMock()
    rag.answer = AsyncMock(
        return_value=GatedAnswer(
            response=RAGResponse(answer="Python is a language.", sources=[], query="q"),
            enriched=False,
        )
    )
    return rag


@pytest.mark.asyncio
async def test_shell_accepts_question_with_single_apostrophe(capsys):
    rag = _rag()

    with patch("builtins.input", side_effect=["c'est quoi Python", "exit"]):
        await run_shell(rag, build_parser())

    rag.answer.assert_awaited_once_with("c'est quoi Python")
    assert "Python is a language." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_shell_quoted_command_still_uses_shell_syntax():
    rag = _rag()

    with patch("builtins.input", side_effect=['search "l\'IA en 2024"', "exit"]):
        await run_shell(rag, build_parser())

    rag.answer.assert_awaited_once_with("l'IA en 2024")


@pytest.mark.asyncio
async def test_shell_stops_on_end_of_input():
    rag = _rag()

    with patch("builtins.input", side_effect=EOFError):
        await run_shell(rag, build_parser())

    rag.answer.assert_not_awaited()
