from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from riskreport.report.builder import build_report_pdf
from riskreport.report.inspect import summarize_pdf
from riskreport.report.surface import ReportBuildError
from riskreport.types import DocumentMode, ReportInput, ReportKind


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_input(path: Path, mode: str | None) -> ReportInput:
    payload = json.loads(path.read_text(encoding='utf-8'))
    report_input = ReportInput.model_validate(payload)
    if mode:
        report_input = report_input.model_copy(update={'mode': DocumentMode(mode)})
    return report_input


def cmd_build(args: argparse.Namespace) -> int:
    input_path = Path(args.input).expanduser().resolve()
    if not input_path.exists() or not input_path.is_file():
        _print_json({'status': 'error', 'message': f'Input not found: {input_path}'})
        return 2

    try:
        report_input = _load_input(input_path, args.mode)
    except json.JSONDecodeError as exc:
        _print_json({'status': 'error', 'message': f'Input is not valid JSON: {exc}'})
        return 2
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        _print_json({'status': 'error', 'message': 'Input failed validation', 'errors': errors})
        return 2

    try:
        result = build_report_pdf(report_input, kind=args.kind)
    except ReportBuildError as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 1

    output_path = Path(args.output).expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.pdf_bytes)
    _print_json({'status': 'ok', 'output': str(output_path), **result.summary()})
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    pdf_path = Path(args.pdf).expanduser().resolve()
    if not pdf_path.exists() or not pdf_path.is_file():
        _print_json({'status': 'error', 'message': f'PDF not found: {pdf_path}'})
        return 2

    summary = summarize_pdf(pdf_path.read_bytes())
    _print_json({'status': 'ok', 'pdf': str(pdf_path), **summary.to_dict()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Compliance report PDF builder')
    parser.add_argument('--log-level', default='WARNING', help='Python logging level')
    sub = parser.add_subparsers(dest='command', required=True)

    build = sub.add_parser('build', help='Build a report PDF from a JSON snapshot')
    build.add_argument('--input', required=True, help='Path to the report input JSON')
    build.add_argument('--kind', required=True, choices=[kind.value for kind in ReportKind])
    build.add_argument('--output', required=True, help='Where to write the PDF')
    build.add_argument('--mode', choices=[mode.value for mode in DocumentMode], required=False,
                       help='Override the document mode derived from status')
    build.set_defaults(func=cmd_build)

    inspect_cmd = sub.add_parser('inspect', help='Summarize a generated PDF')
    inspect_cmd.add_argument('--pdf', required=True, help='Path to PDF file')
    inspect_cmd.set_defaults(func=cmd_inspect)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
