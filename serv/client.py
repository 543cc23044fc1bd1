import argparse
import logging
import sys

from pydantic import ValidationError

from serv.config import DEFAULT_QUEUE_SIZE, DEFAULT_TIMEOUT_S, ClientSettings, configure_logging
from serv.uploader import UploadClient
from serv.watcher import FileWatcher

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="serv-client",
        description="Watch a directory and upload finished images to a serv instance.",
    )
    p.add_argument("path", help="directory to watch (not recursive)")
    p.add_argument("url", help="base URL of your serv instance")
    p.add_argument("api_key", help="API key for your serv instance")
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help="upload timeout in seconds, 0 to wait forever (default: %(default)s)",
    )
    p.add_argument(
        "--queue-size",
        type=int,
        default=DEFAULT_QUEUE_SIZE,
        help="pending event capacity, 0 for unbounded (default: %(default)s)",
    )
    p.add_argument("--log-level", default="INFO")
    return p


def settings_from_args(argv=None) -> ClientSettings:
    args = build_parser().parse_args(argv)
    return ClientSettings(
        watch_path=args.path,
        server_url=args.url,
        api_key=args.api_key,
        timeout=args.timeout or None,
        queue_size=args.queue_size,
        log_level=args.log_level,
    )


def run(settings: ClientSettings) -> int:
    watcher = FileWatcher(settings.watch_path, queue_size=settings.queue_size)
    try:
        watcher.start()
    except OSError as e:
        logger.error("could not watch %s: %s", settings.watch_path, e)
        return 1

    with UploadClient(settings) as client:
        try:
            client.run(watcher)
        except KeyboardInterrupt:
            logger.info("stopping")
        finally:
            watcher.close()
    return 0


def main(argv=None) -> int:
    try:
        settings = settings_from_args(argv)
    except ValidationError as e:
        print(f"invalid arguments: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)
    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
