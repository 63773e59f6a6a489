"""Logvault demo — emits sample application logs into a persistent store."""

import argparse
import logging
import os
import random
import signal
import sys
import time
import uuid

from logvault.config import load_config, load_yaml_config
from logvault.handler import PersistentLogHandler
from logvault.store import LogStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [logvault] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = [logging.INFO, logging.INFO, logging.INFO, logging.DEBUG, logging.WARNING, logging.ERROR]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    logging.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
    ],
    logging.DEBUG: [
        "Entering request handler",
        "Token validation started",
    ],
    logging.WARNING: [
        "Slow query detected (>500ms)",
        "Retry attempt 2 for upstream call",
    ],
    logging.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
    ],
}


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Logvault demo")
    parser.add_argument("--config", default=os.environ.get("LOGVAULT_CONFIG"),
                        help="Path to YAML config file")
    parser.add_argument("--count", type=int, default=200,
                        help="Number of demo records to emit (default: 200)")
    parser.add_argument("--rate", type=float, default=50.0,
                        help="Records per second (default: 50)")
    return parser


def emit_demo_record():
    level = random.choice(LEVELS)
    service = random.choice(SERVICES)
    logging.getLogger(f"demo.{service}").log(
        level,
        random.choice(MESSAGES[level]),
        extra={"metadata": {
            "request_id": uuid.uuid4().hex[:8],
            "duration_ms": random.randint(1, 900),
        }},
    )


def main(argv=None):
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args(argv)
    config = load_config(load_yaml_config(args.config))
    logger.info("Config: db_path=%s, queue_size=%d, level=%s",
                config.db_path, config.queue_size, config.log_level)

    store = LogStore(config.db_path, queue_size=config.queue_size)
    handler = PersistentLogHandler(
        label=config.label,
        store=store,
        log_level=config.level_number,
        metadata=config.default_metadata,
    )
    logging.getLogger("demo").addHandler(handler)
    logging.getLogger("demo").setLevel(logging.DEBUG)

    logger.info("Session %s started", handler.start_session())
    interval = 1.0 / args.rate if args.rate > 0 else 0.0
    emitted = 0
    try:
        while _running and emitted < args.count:
            if emitted == args.count // 2:
                logger.info("Rotated to session %s", handler.start_session())
            emit_demo_record()
            emitted += 1
            if interval:
                time.sleep(interval)
    except KeyboardInterrupt:
        pass

    store.close()
    stats = store.writer.metrics.snapshot()
    logger.info(
        "Done: emitted=%d written=%d failed=%d dropped=%d stored=%d",
        emitted, stats["written"], stats["failed"], stats["dropped"], store.count(),
    )


if __name__ == "__main__":
    main()
