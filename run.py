#!/usr/bin/env python3
"""
Command line runner for the Exam Extractor
"""
import argparse
import logging
import sys
from pathlib import Path

from config import settings
from utils.exceptions import ExamExtractionError


def run_extract(args) -> int:
    """Extract questions and answers from every exam document"""
    from services.exam_batch_service import ExamBatchService, format_summary

    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    if args.from_text:
        input_dir = args.text_dir or settings.text_dir
        pattern = settings.text_pattern
    else:
        input_dir = args.input_dir or settings.input_dir
        pattern = settings.document_pattern

    service = ExamBatchService()
    try:
        result = service.run(input_dir, args.output_dir or settings.output_dir, pattern=pattern)
    except ExamExtractionError as e:
        logger.error(f"Extraction failed: {e}")
        return 1

    print(format_summary(result))
    return 0 if result.success else 1


def run_convert(args) -> int:
    """Convert exam documents into normalized text files"""
    from services.exam_batch_service import ExamBatchService, format_summary

    service = ExamBatchService()
    try:
        result = service.convert_documents(
            args.input_dir or settings.input_dir,
            args.text_dir or settings.text_dir
        )
    except ExamExtractionError as e:
        logging.getLogger(__name__).error(f"Conversion failed: {e}")
        return 1

    print(format_summary(result))
    return 0 if result.success else 1


def run_analyze(args) -> int:
    """Audit previously generated tables"""
    from services.exam_analyzer import ExamAnalyzer, format_report

    output_dir = Path(args.output_dir or settings.output_dir)
    analyzer = ExamAnalyzer(expected_questions=settings.expected_questions_per_exam)

    try:
        report = analyzer.analyze_files(
            str(output_dir / settings.questions_filename),
            str(output_dir / settings.answers_filename),
            encoding=settings.file_encoding
        )
    except ExamExtractionError as e:
        logging.getLogger(__name__).error(f"Analysis failed: {e}")
        return 1

    print(format_report(report))
    return 1 if report.has_issues else 0


COMMANDS = {
    "extract": run_extract,
    "convert": run_convert,
    "analyze": run_analyze,
}


def main(argv=None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Life in the UK exam extractor")
    parser.add_argument(
        "command",
        nargs="?",
        default="extract",
        choices=sorted(COMMANDS),
        help="Command to run"
    )
    parser.add_argument("--input-dir", help="Directory of Exam_<N>.docx documents")
    parser.add_argument("--text-dir", help="Directory of normalized Exam_<N>.txt files")
    parser.add_argument("--output-dir", help="Directory for questions.csv and answers.csv")
    parser.add_argument(
        "--from-text",
        action="store_true",
        help="Extract from normalized text files instead of Word documents"
    )
    parser.add_argument("--log-level", help="Logging level")
    parser.add_argument("--log-file", help="Optional log file")

    args = parser.parse_args(argv)

    from utils.logging import setup_logging
    setup_logging(log_level=args.log_level, log_file=args.log_file or settings.log_file)

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
