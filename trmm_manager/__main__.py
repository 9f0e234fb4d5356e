import argparse
import os
from typing import List, Optional

from . import config
from .logging_config import get_logger, reload_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=config.APP_NAME, description="Desktop client for Tactical RMM servers.")
    parser.add_argument("-c", "--console", action="store_true", help="mirror the log to stdout")
    parser.add_argument("--debug", action="store_true", help="verbose logging, including request diagnostics")
    parser.add_argument("--log", action="store_true", help="write the rotating log file")
    parser.add_argument("--data-dir", default="", help="directory for profiles, API keys and logs")
    parser.add_argument("--timeout", type=float, default=None, help="request timeout in seconds")
    parser.add_argument("--insecure", action="store_true", help="skip TLS certificate verification")
    return parser.parse_args(argv)


def apply_args(args: argparse.Namespace) -> None:
    """Export CLI flags as environment and reload configuration and logging."""
    if args.console:
        os.environ["TRMM_CONSOLE"] = "1"
    if args.debug:
        os.environ["TRMM_DEBUG"] = "1"
    if args.log or args.debug:
        os.environ["TRMM_LOG"] = "1"
    if args.data_dir:
        os.environ["TRMM_DATA_DIR"] = args.data_dir
    if args.timeout is not None:
        os.environ["TRMM_REQUEST_TIMEOUT_S"] = str(args.timeout)
    if args.insecure:
        os.environ["TRMM_VERIFY_TLS"] = "0"
    config.reload_from_env()
    reload_logging()


def main(argv: Optional[List[str]] = None) -> None:
    apply_args(parse_args(argv))
    log = get_logger("main")
    log.info("Starting %s %s (data dir %s)", config.APP_NAME, config.VERSION, config.DATA_DIR)

    from .launcher.app import App

    app = App()
    app.mainloop()


if __name__ == "__main__":
    main()
