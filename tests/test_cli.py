"""
Tests for the journeykit CLI
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner
from loguru import logger

from journeykit.cli.main import cli


SAMPLE_CONFIG = Path(__file__).parent.parent / "configs" / "signup.yaml"

TWO_STEP_YAML = """
    steps:
      - header: Let's get started
        questions:
          - name: firstName
            prompt: What's your first name?
            type: input
            placeholder: Enter your first name
            validation:
              rule: string
              min_length: 2
              message: Name must be at least 2 characters
      - header: Contact Info
        questions:
          - name: email
            prompt: What is your email address?
            type: input
            validation:
              rule: email
              message: Please enter a valid email
"""


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks bound to the runner's streams"""
    yield
    logger.remove()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def journey_file(tmp_path):
    path = tmp_path / "journey.yaml"
    path.write_text(textwrap.dedent(TWO_STEP_YAML), encoding="utf-8")
    return path


class TestVersionCommand:

    def test_version(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "journeykit version" in result.output


class TestValidateCommand:
    """journeykit journey validate"""

    def test_valid_config(self, runner):
        result = runner.invoke(cli, ["journey", "validate", str(SAMPLE_CONFIG)])
        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "Steps: 3" in result.output

    def test_unknown_question_type(self, runner, tmp_path):
        path = tmp_path / "journey.yaml"
        path.write_text("- header: Start\n"
                        "  questions:\n"
                        "    - name: level\n"
                        "      prompt: \"Level?\"\n"
                        "      type: slider\n",
                        encoding="utf-8")
        result = runner.invoke(cli, ["journey", "validate", str(path)])
        assert result.exit_code == 1
        assert "Question type 'slider' is not supported" in result.output


class TestCheckCommand:
    """journeykit journey check"""

    def test_valid_answers(self, runner, journey_file, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("firstName: Al\nemail: x@y.com\n", encoding="utf-8")
        result = runner.invoke(cli, ["journey", "check", str(journey_file), str(answers)])
        assert result.exit_code == 0
        assert "All answers are valid!" in result.output

    def test_invalid_answers(self, runner, journey_file, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("firstName: A\nemail: x@y.com\n", encoding="utf-8")
        result = runner.invoke(cli, ["journey", "check", str(journey_file), str(answers)])
        assert result.exit_code == 1
        assert "firstName: Name must be at least 2 characters" in result.output


class TestRunCommand:
    """journeykit journey run, driven through the runner's input"""

    def test_complete_journey(self, runner, journey_file):
        result = runner.invoke(cli, ["journey", "run", str(journey_file)],
                               input="Al\nnext\nx@y.com\nnext\n")
        assert result.exit_code == 0, result.output
        assert "Journey completed successfully" in result.output
        assert '"firstName": "Al"' in result.output
        assert '"email": "x@y.com"' in result.output

    def test_invalid_answer_is_asked_again(self, runner, journey_file):
        result = runner.invoke(cli, ["journey", "run", str(journey_file)],
                               input="A\nnext\nAl\nnext\nx@y.com\nnext\n")
        assert result.exit_code == 0, result.output
        assert "Name must be at least 2 characters" in result.output
        assert '"firstName": "Al"' in result.output

    def test_answers_written_to_output(self, runner, journey_file, tmp_path):
        output = tmp_path / "answers.json"
        result = runner.invoke(cli, ["journey", "run", str(journey_file), "--output", str(output)],
                               input="Al\nnext\nx@y.com\nnext\n")
        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text(encoding="utf-8")) == {"firstName": "Al", "email": "x@y.com"}

    def test_back_on_first_step_leaves(self, runner, journey_file):
        result = runner.invoke(cli, ["journey", "run", str(journey_file)], input="Al\nback\n")
        assert result.exit_code == 0, result.output
        assert "Leaving journey → /" in result.output
        assert "Journey not completed" in result.output

    def test_quit(self, runner, journey_file):
        result = runner.invoke(cli, ["journey", "run", str(journey_file)], input="Al\nquit\n")
        assert result.exit_code == 0, result.output
        assert "Journey not completed" in result.output

    def test_start_step_and_initial_values(self, runner, journey_file, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text("firstName: Al\n", encoding="utf-8")
        result = runner.invoke(cli, ["journey", "run", str(journey_file), "--start-step", "1",
                                     "--initial-values", str(values)],
                               input="x@y.com\nnext\n")
        assert result.exit_code == 0, result.output
        assert '"firstName": "Al"' in result.output
