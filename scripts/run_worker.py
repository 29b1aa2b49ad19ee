"""Run an RQ worker on the default queue."""

from rq import Worker

from tempmail.core.config import get_settings
from tempmail.core.logging import configure_logging
from tempmail.workers.queue import get_queue


def main() -> None:
    configure_logging(get_settings().LOG_LEVEL)
    queue = get_queue("default")
    Worker([queue], connection=queue.connection).work()


if __name__ == "__main__":
    main()
