"""
Journey CLI commands - External interface layer
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional
import click

from ..services.journey.journey_service import JourneyService
from ..renderers.console import register_defaults
from ..core.exceptions import ConfigError, FieldValidationError, JourneyError
from ..core.logger import setup_logger


@click.group()
def journey():
    """Multi-step form journey commands"""
    pass


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.option('-o', '--output',
              type=click.Path(dir_okay=False, path_type=Path),
              help='Write the completed answers to this JSON file')
@click.option('-s', '--start-step',
              default=0,
              type=int,
              help='Step index to start at')
@click.option('-i', '--initial-values',
              type=click.Path(exists=True, path_type=Path),
              help='YAML file with answers to pre-populate')
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
def run(file: Path, output: Optional[Path], start_step: int, initial_values: Optional[Path], verbose: bool):
    """Run a journey interactively in the terminal"""

    setup_logger(verbose)

    register_defaults()
    asyncio.run(_run_journey_async(file, output, start_step, initial_values))


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
def validate(file: Path, verbose: bool):
    """Validate a journey YAML file against the registered question types"""

    setup_logger(verbose)

    register_defaults()
    asyncio.run(_validate_journey_async(file))


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.argument('answers',
               type=click.Path(exists=True, path_type=Path))
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
def check(file: Path, answers: Path, verbose: bool):
    """Check an answers YAML file against every step of a journey"""

    setup_logger(verbose)

    asyncio.run(_check_answers_async(file, answers))


async def _run_journey_async(file: Path, output: Optional[Path], start_step: int, initial_values: Optional[Path]):
    """Async journey run implementation"""

    try:
        journey_service = JourneyService()

        journey_config = await journey_service.load_config(file)
        journey_service.check_config(journey_config)

        values = await journey_service.load_answers(initial_values) if initial_values else None
        answers = await journey_service.run_interactive(journey_config, start_step, values)

        if answers is None:
            click.echo("Journey not completed")
            return

        click.echo("Journey completed successfully")
        payload = json.dumps(answers, indent=2, ensure_ascii=False)
        if output:
            output.write_text(payload + "\n", encoding='utf-8')
            click.echo(f"Answers written to {output}")
        else:
            click.echo(payload)

    except (JourneyError, ConfigError) as e:
        click.echo(f"Command failed: {e}", err=True)
        sys.exit(1)


async def _validate_journey_async(file: Path):
    """Async journey validation implementation"""

    try:
        journey_service = JourneyService()

        journey_config = await journey_service.load_config(file)
        summary = journey_service.check_config(journey_config)

        click.echo("Configuration is valid!")
        if summary["title"]:
            click.echo(f"Journey: {summary['title']}")
        click.echo(f"Steps: {summary['steps']}")
        click.echo(f"Questions: {summary['questions']}")
        click.echo(f"Types: {', '.join(summary['types'])}")

    except (JourneyError, ConfigError) as e:
        click.echo(f"Command failed: {e}", err=True)
        sys.exit(1)


async def _check_answers_async(file: Path, answers_file: Path):
    """Async answers check implementation"""

    try:
        journey_service = JourneyService()

        journey_config = await journey_service.load_config(file)
        answers = await journey_service.load_answers(answers_file)
        results = journey_service.check_answers(journey_config, answers)

    except (JourneyError, ConfigError) as e:
        click.echo(f"Command failed: {e}", err=True)
        sys.exit(1)

    failed = False
    for index, (step, result) in enumerate(zip(journey_config.steps, results)):
        try:
            result.raise_for_errors()
            click.echo(f"Step {index + 1} ({step.header}): ok")
        except FieldValidationError as e:
            failed = True
            click.echo(f"Step {index + 1} ({step.header}): {e}", err=True)

    if failed:
        sys.exit(1)
    click.echo("All answers are valid!")
