"""
Command-line interface for the study assistant.

Usage:
    study-assistant ingest --subject S --type youtube --url <url>
    study-assistant ingest --subject S --type pdf --file notes.pdf
    study-assistant ingest --subject S --type link --url <url> --content-file page.txt
    study-assistant chat --subject S "What is entropy?"
    study-assistant list --subject S
    study-assistant delete <resource_id>
    study-assistant info
"""

import argparse
import json
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from .debug_logger import DebugLogger, configure_logging
from .errors import InvalidRequest, StudyAssistantError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='study-assistant',
        description='Ingest study materials and chat with them',
    )
    parser.add_argument('--log-level', default='INFO', help='Console log level (default: INFO)')
    parser.add_argument('--debug-logging', action='store_true',
                        help='Write a detailed session log to debug_logs/')
    sub = parser.add_subparsers(dest='command', required=True)

    ingest = sub.add_parser('ingest', help='Add a resource to a subject')
    ingest.add_argument('--subject', '-s', required=True, help='Subject ID')
    ingest.add_argument('--type', '-t', required=True, choices=['pdf', 'youtube', 'link'])
    ingest.add_argument('--title', help='Resource title (default: taken from the source)')
    ingest.add_argument('--url', help='YouTube or link URL')
    ingest.add_argument('--file', '-f', help='PDF file to upload')
    ingest.add_argument('--content-file', help='Text file with pasted content for a link')

    chat = sub.add_parser('chat', help='Ask a question about a subject')
    chat.add_argument('--subject', '-s', required=True, help='Subject ID')
    chat.add_argument('message', help='Question to ask')

    list_cmd = sub.add_parser('list', help='List resources of a subject')
    list_cmd.add_argument('--subject', '-s', required=True, help='Subject ID')

    delete = sub.add_parser('delete', help='Delete a resource and its chunks')
    delete.add_argument('resource_id')

    sub.add_parser('info', help='Show embedding model and vector store status')

    return parser


def build_ingest_request(args: argparse.Namespace) -> dict:
    request = {
        'subject_id': args.subject,
        'type': args.type,
        'title': args.title,
        'url': args.url,
    }
    try:
        if args.file:
            path = Path(args.file)
            request['file_buffer'] = path.read_bytes()
            request['filename'] = path.name
        if args.content_file:
            request['content'] = Path(args.content_file).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidRequest(f"Cannot read input file: {e}") from e
    return request


def run(args: argparse.Namespace, app, cancel_event: threading.Event) -> dict:
    """Dispatch a parsed command to the application interface."""
    if args.command == 'ingest':
        return app.create_resource(build_ingest_request(args), cancel_event=cancel_event)
    if args.command == 'chat':
        return app.chat({'subject_id': args.subject, 'message': args.message},
                        cancel_event=cancel_event)
    if args.command == 'list':
        return {'resources': app.list_resources(args.subject)}
    if args.command == 'delete':
        return {'deleted': app.delete_resource(args.resource_id)}
    if args.command == 'info':
        return app.info()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None, app=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    debug_logger = DebugLogger() if args.debug_logging else None

    if app is None:
        from .app_interface import StudyAssistant
        app = StudyAssistant()

    cancel_event = threading.Event()
    try:
        response = run(args, app, cancel_event)
        exit_code = 0
    except StudyAssistantError as e:
        response = e.to_response()
        exit_code = 1
    except KeyboardInterrupt:
        cancel_event.set()
        logger.warning("Interrupted")
        response = {'error': 'Interrupted', 'status': 499}
        exit_code = 130

    if debug_logger:
        debug_logger.log_event(args.command, response)
        logger.info(f"Session log: {debug_logger.session_log}")
        debug_logger.cleanup()

    print(json.dumps(response, indent=2, ensure_ascii=False))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
