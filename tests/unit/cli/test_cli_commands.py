"""Tests for the lexicard command line interface."""

from __future__ import annotations

import asyncio
import re
from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from lexicard import __version__
from lexicard.application_services.practice.item_sources import AllListsSource
from lexicard.application_services.practice.session_controller import SessionController
from lexicard.cli.main import _practice_card, cli
from lexicard.domain.learning.services.delete_word import DeleteWord
from lexicard.domain.shared.models import Direction
from lexicard.domain.shared.services import PersistenceError
from lexicard.infrastructure.database.database import DatabaseManager, SqlVocabRepository
from lexicard.infrastructure.messaging.event_bus import EventBus

ENV = {"LEXICARD_LOG_FILE": "", "LEXICARD_SHUFFLE_SEED": "1"}


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "words.db")


@pytest.fixture
def repository(db_path):
    return SqlVocabRepository(DatabaseManager(db_path))


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, db_path, *args, input=None):
    return runner.invoke(cli, ["--db", db_path, *args], input=input, env=ENV)


class TestListCommands:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_add_list_and_word(self, runner, db_path, repository):
        result = invoke(runner, db_path, "add-list", "German", "--language", "de")

        assert result.exit_code == 0
        assert "Created list German" in result.output
        list_id = re.search(r"\(([0-9a-f-]{36})\)", result.output).group(1)

        result = invoke(runner, db_path, "add-word", list_id, "Haus", "house")

        assert result.exit_code == 0
        assert "Added Haus = house" in result.output
        vocab_list = asyncio.run(repository.get_list(list_id))
        assert [word.term for word in vocab_list.words] == ["Haus"]

    def test_add_word_to_unknown_list(self, runner, db_path):
        result = invoke(runner, db_path, "add-word", "missing", "Haus", "house")

        assert result.exit_code == 1
        assert "List missing not found" in result.output

    def test_lists_without_lists(self, runner, db_path):
        result = invoke(runner, db_path, "lists")

        assert result.exit_code == 0
        assert "No lists yet" in result.output

    def test_lists_shows_lists(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        repository.add_word(vocab_list.id, "Haus", "house")

        result = invoke(runner, db_path, "lists")

        assert result.exit_code == 0
        assert "German" in result.output

    def test_delete_word(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        word = repository.add_word(vocab_list.id, "Haus", "house")

        result = invoke(runner, db_path, "delete-word", word.id)

        assert result.exit_code == 0
        assert asyncio.run(repository.get_list(vocab_list.id)).words == []

    def test_delete_unknown_word(self, runner, db_path):
        result = invoke(runner, db_path, "delete-word", "ghost")

        assert result.exit_code == 1
        assert "Word ghost not found" in result.output


class TestDueCommand:
    def test_counts_both_directions(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        repository.add_word(vocab_list.id, "Haus", "house")
        repository.add_word(vocab_list.id, "Baum", "tree")

        result = invoke(runner, db_path, "due")

        assert result.exit_code == 0
        assert "A→B: 2 due" in result.output
        assert "B→A: 2 due" in result.output

    def test_unknown_list(self, runner, db_path):
        result = invoke(runner, db_path, "due", "--list", "missing")

        assert result.exit_code == 1
        assert "List missing not found" in result.output


class TestPracticeCommand:
    def test_answer_single_word(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        word = repository.add_word(vocab_list.id, "Haus", "house")

        result = invoke(runner, db_path, "practice", input="\n3\nq\n")

        assert result.exit_code == 0, result.output
        assert "Haus" in result.output
        assert "house" in result.output
        assert "Next review in 1h" in result.output
        assert "Session complete!" in result.output
        assert "1/1 words answered" in result.output
        state = asyncio.run(repository.get_review_state(word.id, Direction.FORWARD))
        assert state.repetitions == 1
        assert asyncio.run(repository.get_review_state(word.id, Direction.REVERSE)) is None

    def test_reverse_direction_for_one_list(self, runner, db_path, repository):
        german = repository.add_list("German")
        word = repository.add_word(german.id, "Haus", "house")
        other = repository.add_list("French")
        repository.add_word(other.id, "maison", "house")

        result = invoke(
            runner,
            db_path,
            "practice",
            "--list",
            german.id,
            "--direction",
            "reverse",
            input="\n1\nq\n",
        )

        assert result.exit_code == 0, result.output
        assert "maison" not in result.output
        assert "Next review in 1m" in result.output
        state = asyncio.run(repository.get_review_state(word.id, Direction.REVERSE))
        assert state.repetitions == 0

    def test_nothing_due(self, runner, db_path, repository):
        repository.add_list("Empty")

        result = invoke(runner, db_path, "practice", input="q\n")

        assert result.exit_code == 0
        assert "No words due" in result.output

    def test_delete_during_practice(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        word = repository.add_word(vocab_list.id, "Haus", "house")

        result = invoke(runner, db_path, "practice", input="\nx\nq\n")

        assert result.exit_code == 0, result.output
        assert asyncio.run(repository.get_list(vocab_list.id)).words == []
        assert asyncio.run(repository.get_review_state(word.id, Direction.FORWARD)) is None

    def test_quit_mid_session_keeps_answers(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        for term in ("Haus", "Baum"):
            repository.add_word(vocab_list.id, term, term)

        result = invoke(runner, db_path, "practice", input="\n4\n\nq\n")

        assert result.exit_code == 0, result.output
        lists = asyncio.run(repository.get_lists())
        answered = [
            w for w in lists[0].words if w.review_state(Direction.FORWARD) is not None
        ]
        assert len(answered) == 1

    def test_failed_save_is_reported_before_next_card(self, runner, db_path, repository):
        vocab_list = repository.add_list("German")
        for term in ("Haus", "Baum"):
            repository.add_word(vocab_list.id, term, term)

        with patch.object(
            SqlVocabRepository,
            "put_review_state",
            AsyncMock(side_effect=PersistenceError("disk full", "put_review_state")),
        ):
            result = invoke(runner, db_path, "practice", input="\n3\n\nq\n")

        assert result.exit_code == 0, result.output
        notice = result.output.index("Could not save progress for this word: disk full")
        assert notice < result.output.index("2/2")


class TestPracticeCard:
    def test_no_current_card_is_a_click_error(self, repository):
        controller = SessionController(AllListsSource(repository), repository)
        delete_service = DeleteWord(repository, EventBus())

        with pytest.raises(click.ClickException, match="No card to practice"):
            asyncio.run(_practice_card(controller, delete_service))
