import argparse
import logging
import os
import sys

from . import config
from .core import UploaderApp
from .exceptions import ClientError, ConfigurationError
from .settings import Settings
from .upload.cases import DemistoCaseSink, DryRunCaseSink
from .upload.client import DemistoClient


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(verbose: bool, extra_verbose: bool):
    """Progress goes to stdout; warnings and errors go to stderr."""
    if extra_verbose:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.addFilter(_BelowWarning())
    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[out_handler, err_handler],
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Demisto uploader: create investigations and entries from directories"
    )

    p.add_argument("-f", "--folder", default=".", help="Folder to recursively iterate")
    p.add_argument("-u", "--username", default=os.environ.get(config.ENV_USERNAME, ""),
                   help=f"Username to login to the server (default: ${config.ENV_USERNAME})")
    p.add_argument("-p", "--password", default=os.environ.get(config.ENV_PASSWORD, ""),
                   help=f"Password to login to the server (default: ${config.ENV_PASSWORD})")
    p.add_argument("-s", "--server", default=os.environ.get(config.ENV_SERVER, ""),
                   help=f"Demisto server URL (default: ${config.ENV_SERVER})")
    p.add_argument("--investigation", default="",
                   help="If provided, investigation ID to use instead of creating investigations")
    p.add_argument("--regex", default="",
                   help="Only entries whose path matches the regex are evaluated and uploaded")

    p.add_argument("-v", "--verbose", action=argparse.BooleanOptionalAction, default=True,
                   help="Print the directories being handled")
    p.add_argument("-vv", "--extra-verbose", action="store_true", help="Print details about every file")
    p.add_argument("--limit", type=int, default=-1, help="Count of files to stop after")
    p.add_argument("--test", "--dry-run", dest="test", action="store_true",
                   help="Iterate and fingerprint the files without uploading them")
    p.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    p.add_argument("--progress", action="store_true", help="Show a progress bar")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.extra_verbose)

    logging.info("=== Demisto Uploader Started ===")

    try:
        settings = Settings.from_args(args)
    except ConfigurationError as e:
        logging.error(str(e))
        sys.exit(1)

    if settings.dry_run:
        app = UploaderApp(settings, DryRunCaseSink())
        summary = app.run()
        sys.exit(1 if summary.upload_failed else 0)

    client = DemistoClient(settings.server, settings.username, settings.password, verify=not settings.insecure)
    try:
        user = client.login()
    except ClientError as e:
        logging.error(f"Error logging in - {e}")
        sys.exit(1)
    logging.info(f"Logged in successfully with user {user.username} [{user.name} {user.email}]")

    logged_out = True
    try:
        app = UploaderApp(settings, DemistoCaseSink(client, settings.investigation))
        summary = app.run()
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        summary = None
    finally:
        # Reported only; an exception from the run keeps propagating
        try:
            client.logout()
        except ClientError as e:
            logging.error(f"Unable to logout - {e}")
            logged_out = False

    if not logged_out or summary is None or summary.upload_failed:
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
