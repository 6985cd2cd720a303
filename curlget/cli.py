"""
Command-line entry point: curlget URL
"""
import argparse
import sys
from typing import List, Optional

from .config import PROGRAM_NAME, USER_AGENT, Settings
from .download_manager import DownloadManager
from .engine import TransferPhase, TransferResult
from .errors import DownloadError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


class ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 instead of argparse's 2"""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROGRAM_NAME,
        description="Download a single resource over HTTP, HTTPS or FTP into the current directory.",
    )
    parser.add_argument("url", metavar="URL", nargs="?", help="https://, http:// or ftp:// URL to download")
    parser.add_argument("-v", "--version", action="store_true", help="show the version and exit")
    return parser


def parse_arguments(argv: List[str]) -> argparse.Namespace:
    """
    Parse the command line: exactly one URL, or -v/--version on its own

    Raises:
        SystemExit: 0 after printing the version, 1 on any other argument shape
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        if len(argv) != 1:
            parser.error("-v/--version takes no other arguments")
        print(USER_AGENT)
        parser.exit(EXIT_OK)

    if args.url is None:
        parser.error("the following arguments are required: URL")
    return args


def exit_code(result: TransferResult) -> int:
    if result.phase is TransferPhase.COMPLETED:
        return EXIT_OK
    if result.phase is TransferPhase.CANCELLED:
        return EXIT_CANCELLED
    return EXIT_FAILURE


def main(argv: Optional[List[str]] = None, manager: Optional[DownloadManager] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = parse_arguments(argv)

    if manager is None:
        manager = DownloadManager(Settings.from_env())

    try:
        result = manager.download(args.url)
    except DownloadError:
        # Already reported by the manager
        return EXIT_FAILURE
    except KeyboardInterrupt:
        manager.stream.write("\nKeyboard interrupt received. Download aborted.\n\n")
        manager.stream.flush()
        return EXIT_CANCELLED

    return exit_code(result)
