"""Command line entry point for the choreo sync pipelines."""
import argparse
import json
import logging
import sys
import time
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from gateway.dropbox import DropboxClient
from gateway.errors import GatewayCredentialError, GatewayError
from gateway.fitbit import FitbitClient
from gateway.google import GoogleCalendarClient, GoogleDocsClient
from gateway.lastfm import LastFmClient
from gateway.session import GatewaySession
from gateway.twitter import TwitterClient
from processor.calendar_sync import CalendarSynchronizer
from processor.docs_backup import DocsBackup
from processor.errors import CalendarNotFoundError
from processor.event_finder import EventFinder
from processor.models import FailurePolicy
from processor.step_status import StepStatus
from settings import ConfigurationError, Settings, load_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REMOTE_FAILURE = 1
EXIT_CONFIGURATION = 2
EXIT_CREDENTIALS = 3
EXIT_NOT_FOUND = 4
EXIT_EVENT_FAILURE = 5

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO', log_format: str = 'json') -> None:
    """
    Configure root logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for structured records, "text" for plain lines
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == 'text':
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
    else:
        handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _failure(
    exit_code: int,
    message: str,
    error: Exception,
    start_time: float,
    exc_info: bool = False,
    **details: Any
) -> Dict[str, Any]:
    duration = time.time() - start_time
    logger.error(
        f"{message}: {error}",
        extra={'error_type': type(error).__name__, 'duration_seconds': round(duration, 2)},
        exc_info=exc_info
    )
    response = {
        'exitCode': exit_code,
        'message': message,
        'error': str(error),
        'error_type': type(error).__name__,
        'duration_seconds': round(duration, 2)
    }
    response.update(details)
    return response


def _classify(error: Exception, start_time: float, stage: str) -> Dict[str, Any]:
    """Translate a stage failure into a response with its exit code."""
    if isinstance(error, GatewayCredentialError):
        return _failure(
            EXIT_CREDENTIALS,
            'Authentication failed; check the gateway and service credentials',
            error,
            start_time,
            stage=stage
        )
    if isinstance(error, CalendarNotFoundError):
        return _failure(
            EXIT_NOT_FOUND,
            f"Calendar '{error.calendar_name}' not found",
            error,
            start_time,
            stage=stage
        )
    return _failure(
        EXIT_REMOTE_FAILURE,
        f"Remote call failed during {stage}",
        error,
        start_time,
        stage=stage
    )


def run_sync(
    settings: Settings,
    town: str,
    band: str,
    calendar_name: Optional[str] = None,
    policy: FailurePolicy = FailurePolicy.ABORT,
    session: Optional[GatewaySession] = None
) -> Dict[str, Any]:
    """
    Find a band's shows in a town and add them to a Google calendar.

    Args:
        settings: Credentials and run settings
        town: Town to match venues against
        band: Artist or band name
        calendar_name: Destination calendar (default: settings.calendar_name)
        policy: Whether to stop or carry on after a failed event
        session: Existing gateway session to reuse

    Returns:
        Response dict with exitCode, message and summary statistics
    """
    calendar_name = calendar_name or settings.calendar_name
    start_time = time.time()
    for label, value in (('town', town), ('band', band)):
        if not value or not value.strip():
            return _failure(
                EXIT_CONFIGURATION,
                "Invalid sync arguments",
                ValueError(f"{label} must be a non-empty string"),
                start_time
            )

    logger.info(
        "Sync started",
        extra={'town': town, 'band': band, 'calendar_name': calendar_name}
    )

    owns_session = session is None
    if owns_session:
        session = GatewaySession(settings.gateway, timeout=settings.timeout_seconds)

    try:
        finder = EventFinder(LastFmClient(session, settings.lastfm_api_key))
        synchronizer = CalendarSynchronizer(GoogleCalendarClient(session, settings.google))

        try:
            search = finder.search(band, town)
        except GatewayError as e:
            return _classify(e, start_time, 'event search')

        if not search.events:
            message = f"No '{band}' events found in {town}"
            logger.info(message)
            return {
                'exitCode': EXIT_OK,
                'message': message,
                'statistics': {
                    'total_found': search.total_found,
                    'matching': 0,
                    'events_added': 0,
                    'duration_seconds': round(time.time() - start_time, 2)
                },
                'errors': []
            }

        try:
            target = synchronizer.resolve_calendar(calendar_name)
        except (GatewayError, CalendarNotFoundError) as e:
            return _classify(e, start_time, 'calendar lookup')

        matching = len(search.events)
        logger.info(
            f"Found {matching} matching {'shows' if matching > 1 else 'show'}, "
            f"adding to {target.name}"
        )

        try:
            sync_result = synchronizer.sync_events(target, search.events, policy=policy)
        except GatewayError as e:
            return _classify(e, start_time, 'event creation')

        duration = time.time() - start_time
        message = (
            f"Found {search.total_found} '{band}' shows, {matching} in {town}; "
            f"added {sync_result.events_added} of {matching} to {target.name}"
        )
        exit_code = EXIT_EVENT_FAILURE if sync_result.failures else EXIT_OK

        logger.info(
            "Sync completed" if exit_code == EXIT_OK else "Sync completed with failures",
            extra={
                'duration_seconds': round(duration, 2),
                'events_added': sync_result.events_added,
                'aborted': sync_result.aborted,
                'errors': sync_result.errors
            }
        )

        return {
            'exitCode': exit_code,
            'message': message,
            'statistics': {
                'total_found': search.total_found,
                'matching': matching,
                'events_added': sync_result.events_added,
                'duration_seconds': round(duration, 2)
            },
            'aborted': sync_result.aborted,
            'errors': sync_result.errors
        }
    except Exception as e:
        return _failure(EXIT_REMOTE_FAILURE, "Sync failed", e, start_time, exc_info=True)
    finally:
        if owns_session:
            session.close()


def run_docs_backup(
    settings: Settings,
    folder: Optional[str] = None,
    session: Optional[GatewaySession] = None
) -> Dict[str, Any]:
    """Back up every Google document into a new Dropbox folder."""
    folder = folder or settings.dropbox_backup_folder
    start_time = time.time()

    owns_session = session is None
    if owns_session:
        session = GatewaySession(settings.gateway, timeout=settings.timeout_seconds)

    try:
        backup = DocsBackup(
            GoogleDocsClient(session, settings.google_docs),
            DropboxClient(session, settings.dropbox),
            folder
        )
        try:
            result = backup.run()
        except GatewayError as e:
            return _classify(e, start_time, 'document backup')

        return {
            'exitCode': EXIT_OK,
            'message': f"Backed up {len(result.uploaded)} documents to {result.folder}",
            'uploaded': result.uploaded,
            'duration_seconds': round(time.time() - start_time, 2)
        }
    except Exception as e:
        return _failure(EXIT_REMOTE_FAILURE, "Backup failed", e, start_time, exc_info=True)
    finally:
        if owns_session:
            session.close()


def run_step_status(
    settings: Settings,
    benchmark: Optional[int] = None,
    session: Optional[GatewaySession] = None
) -> Dict[str, Any]:
    """Tweet whether today's step goal was met."""
    start_time = time.time()

    owns_session = session is None
    if owns_session:
        session = GatewaySession(settings.gateway, timeout=settings.timeout_seconds)

    try:
        status = StepStatus(
            FitbitClient(session, settings.fitbit),
            TwitterClient(session, settings.twitter),
            benchmark=settings.step_benchmark if benchmark is None else benchmark,
            goal_met_message=settings.goal_met_message,
            goal_not_met_message=settings.goal_not_met_message
        )
        try:
            result = status.run()
        except GatewayError as e:
            return _classify(e, start_time, 'step status')

        return {
            'exitCode': EXIT_OK,
            'message': f"Walked {result.steps} of {result.benchmark} steps; tweeted: {result.message}",
            'goal_met': result.goal_met,
            'duration_seconds': round(time.time() - start_time, 2)
        }
    except Exception as e:
        return _failure(EXIT_REMOTE_FAILURE, "Step status failed", e, start_time, exc_info=True)
    finally:
        if owns_session:
            session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='choreo-sync',
        description='Move data between web services through the choreo gateway'
    )
    parser.add_argument('--log-level', default=None, help='Override LOG_LEVEL')
    parser.add_argument('--log-format', choices=['json', 'text'], default='json')
    subparsers = parser.add_subparsers(dest='command', required=True)

    sync = subparsers.add_parser('sync', help="Add a band's shows in a town to Google Calendar")
    sync.add_argument('town')
    sync.add_argument('band')
    sync.add_argument('--calendar', default=None, help='Calendar name (default: CALENDAR_NAME)')
    sync.add_argument(
        '--continue-on-error',
        action='store_true',
        help='Keep adding events after one fails'
    )

    backup = subparsers.add_parser('backup-docs', help='Back up Google Docs to Dropbox')
    backup.add_argument('--folder', default=None, help='Dropbox folder (default: DROPBOX_BACKUP_FOLDER)')

    steps = subparsers.add_parser('tweet-steps', help='Tweet whether the Fitbit step goal was met')
    steps.add_argument('--benchmark', type=int, default=None, help='Step goal (default: STEP_BENCHMARK)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, run the selected pipeline and print its summary.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging(args.log_level or 'INFO', args.log_format)
        logger.error(f"Invalid configuration: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION

    setup_logging(args.log_level or settings.log_level, args.log_format)

    if args.command == 'sync':
        policy = FailurePolicy.CONTINUE if args.continue_on_error else FailurePolicy.ABORT
        response = run_sync(settings, args.town, args.band, args.calendar, policy)
    elif args.command == 'backup-docs':
        response = run_docs_backup(settings, args.folder)
    else:
        response = run_step_status(settings, args.benchmark)

    print(response['message'])
    for error in response.get('errors', []):
        print(f"  failed: {error}")
    if 'error' in response:
        print(f"  error: {response['error']}")

    return response['exitCode']


if __name__ == '__main__':
    sys.exit(main())
