import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import DEFAULT_PATHS, REPORT_STATUS
from .exceptions import ConfigurationError
from .models import ExtractionResult
from .scraper.config import ScraperConfig
from .scraper.orchestrator import ExtractionOrchestrator
from .utils.csv_handler import CSVHandler
from .utils.diagnostics import LoggingDiagnosticSink
from .utils.validation import DataValidator

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_HANDLED = 2


def setup_logging(config: Dict[str, Any]) -> None:
    """Set up logging for both file and console output."""
    log_file = config['logging']['file']
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # Get the root logger
    root_logger = logging.getLogger()

    # Clear any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = getattr(logging, str(config['logging']['level']).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    from logging.handlers import RotatingFileHandler
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=config['logging'].get('max_size', 10485760),
        backupCount=config['logging'].get('backup_count', 5),
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)

    # Console output goes to stderr so stdout stays clean for summaries
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler.setFormatter(file_formatter)
    console_handler.setFormatter(console_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info(f"Logging initialized - Level: {config['logging']['level']}")
    root_logger.debug(f"Log file: {log_file}")


def format_summary(result: ExtractionResult) -> str:
    """Human-readable summary of one extraction run."""
    report = result.report
    lines = [
        f"Platform:   {report.platform or '-'}",
        f"Status:     {report.status}",
        f"Strategy:   {report.strategy or '-'} via {report.agent or '-'}",
        f"Questions:  {report.questions_found} ({report.flagged_questions} need repair)",
        f"Coverage:   choices={report.has_choices} correct={report.has_correct_flags} images={report.has_images}"
    ]
    if result.quiz is not None:
        lines.insert(0, f"Quiz:       {result.quiz.title}")
    if report.missing.get('reasons'):
        lines.append(f"Reasons:    {', '.join(report.missing['reasons'])}")
    for note in report.notes[:10]:
        lines.append(f"Note:       {note}")
    return "\n".join(lines)


def exit_code_for(result: ExtractionResult) -> int:
    if not result.handled:
        return EXIT_NOT_HANDLED
    if result.report.status in (REPORT_STATUS['success'], REPORT_STATUS['partial']):
        return EXIT_OK
    return EXIT_FAILED


def write_json(result: ExtractionResult, output_file: str) -> None:
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        'quiz': result.quiz.to_dict() if result.quiz else None,
        'report': result.report.to_dict()
    }
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logging.getLogger(__name__).info(f"Wrote quiz and report to {path}")


async def run_import(url: str, config: ScraperConfig, enrich_images: Optional[bool] = None) -> ExtractionResult:
    orchestrator = ExtractionOrchestrator(config=config, sink=LoggingDiagnosticSink())
    return await orchestrator.extract(url, enrich_images=enrich_images)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Import a quiz from Kahoot!, Blooket, Wayground or Gimkit')
    parser.add_argument('url', help='Public quiz URL')
    parser.add_argument('--config', type=str, default=DEFAULT_PATHS['config_file'], help='Path to configuration file')
    parser.add_argument('--output', type=str, help='Write quiz and discovery report as JSON to this file')
    parser.add_argument('--csv', type=str, help='Write the flat question table to this CSV file')
    parser.add_argument('--enrich-images', action='store_true', default=None,
                        help='Fill missing question images from stock photo APIs')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Override the configured log level')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.log_level:
        overrides['logging'] = {'level': args.log_level}

    try:
        config = ScraperConfig(args.config, overrides=overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAILED

    setup_logging(config.settings)
    logger = logging.getLogger(__name__)

    result = asyncio.run(run_import(args.url, config, enrich_images=args.enrich_images))

    if result.quiz is not None and result.quiz.questions:
        validation = DataValidator(*config.time_bounds).validate_quiz(result.quiz)
        if validation['invalid_questions']:
            logger.warning(f"{validation['invalid_questions']} question(s) failed validation")

    print(format_summary(result))

    if args.output:
        write_json(result, args.output)
    if args.csv and result.quiz is not None:
        CSVHandler(config.section('storage').get('output_dir', DEFAULT_PATHS['output_dir'])).write_quiz(
            result.quiz, args.csv
        )

    return exit_code_for(result)


if __name__ == "__main__":
    sys.exit(main())
