from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from sismed.config import get_settings
from sismed.errors import InvalidDate, PrescriptionError, SinkWriteFailure
from sismed.runner import plan_prescription, render_and_save
from sismed.storage import read_json
from sismed.types import PrescriptionDocument, load_document, parse_date, utcnow


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def _load_input(path_value: str) -> PrescriptionDocument | None:
    settings = get_settings()
    input_path = Path(path_value).expanduser().resolve()
    if not input_path.exists() or not input_path.is_file():
        _print_json({'status': 'error', 'message': f'Prescription file not found: {input_path}'})
        return None
    try:
        payload = read_json(input_path)
    except (OSError, json.JSONDecodeError) as exc:
        _print_json({'status': 'error', 'message': f'Unreadable prescription file {input_path}: {exc}'})
        return None
    try:
        return load_document(payload, max_replication_months=settings.max_replication_months)
    except InvalidDate as exc:
        _print_json({'status': 'error', 'kind': 'invalid_date', 'message': str(exc)})
    except ValidationError as exc:
        _print_json({'status': 'error', 'kind': 'invalid_prescription', 'errors': json.loads(exc.json())})
    except ValueError as exc:
        _print_json({'status': 'error', 'kind': 'invalid_prescription', 'message': str(exc)})
    return None


def _generated_at(value: str | None) -> datetime:
    if not value:
        return utcnow()
    return datetime.combine(parse_date(value), datetime.min.time())


def cmd_render(args: argparse.Namespace) -> int:
    document = _load_input(args.input)
    if document is None:
        return 2

    try:
        generated_at = _generated_at(args.generated_at)
        output_dir = Path(args.output_dir).expanduser() if args.output_dir else None
        rendered, path = render_and_save(document, generated_at=generated_at, output_dir=output_dir)
    except InvalidDate as exc:
        _print_json({'status': 'error', 'kind': 'invalid_date', 'message': str(exc)})
        return 2
    except SinkWriteFailure as exc:
        _print_json({'status': 'error', 'kind': 'sink_write_failure', 'message': str(exc)})
        return 2
    except PrescriptionError as exc:
        _print_json({'status': 'error', 'kind': 'layout', 'message': str(exc)})
        return 2

    _print_json(
        {
            'status': 'ok',
            'path': str(path),
            'filename': rendered.filename,
            'bytes': len(rendered.content),
            'copies': [
                {
                    'issue_date': copy.issue_date.isoformat(),
                    'pages': copy.page_count,
                }
                for copy in rendered.copies
            ],
        }
    )
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    document = _load_input(args.input)
    if document is None:
        return 2
    try:
        plan = plan_prescription(document)
    except PrescriptionError as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2
    _print_json({'status': 'ok', **plan})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='SISMED prescription PDF composer')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render a prescription JSON file to PDF')
    render.add_argument('--input', required=True, help='Path to prescription JSON file')
    render.add_argument('--output-dir', required=False, help='Directory for the generated PDF')
    render.add_argument('--generated-at', required=False, help='Generation date used in the file name')
    render.set_defaults(func=cmd_render)

    plan = sub.add_parser('plan', help='Show the page plan without rendering')
    plan.add_argument('--input', required=True, help='Path to prescription JSON file')
    plan.set_defaults(func=cmd_plan)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
