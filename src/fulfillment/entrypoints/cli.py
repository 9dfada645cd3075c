"""
Point d'entrée en ligne de commande.

La CLI est un thin adapter : elle lit les arguments, assemble le
contexte et le bus, puis confie le flux de commandes à la boucle
de suivi. Elle ne contient aucune logique métier.

Usage :
    fulfillment inventory_file orders_file
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from fulfillment import config
from fulfillment.adapters import reporting, sources
from fulfillment.service_layer import bootstrap, context, follower

EXIT_CODES = {
    follower.Outcome.DEPLETED: 0,
    follower.Outcome.SOURCE_UNAVAILABLE: 1,
    follower.Outcome.CANCELLED: 130,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fulfillment",
        description="Sert un flux de commandes sur un inventaire jusqu'à épuisement",
    )
    parser.add_argument("inventory_file", help="Fichier d'inventaire initial")
    parser.add_argument("orders_file", help="Flux de commandes, suivi au fil de l'eau")
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Attente initiale (s) quand le flux est à sec",
    )
    parser.add_argument(
        "--max-poll-interval",
        type=float,
        default=None,
        help="Attente maximale (s) entre deux relectures",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Niveau de log (sur stderr)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level or config.get_log_level(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    reporter = reporting.StreamReporter(sys.stdout)
    bus = bootstrap.bootstrap(
        ctx=context.from_inventory_file(args.inventory_file),
        reporter=reporter,
    )
    runner = follower.OrderStreamFollower(
        bus,
        poll_interval=args.poll_interval,
        max_poll_interval=args.max_poll_interval,
    )

    stop = threading.Event()
    previous = {}
    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, lambda *_: stop.set())
    try:
        outcome = runner.follow(sources.FileOrderSource(args.orders_file), stop=stop)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
    return EXIT_CODES[outcome]


if __name__ == "__main__":
    sys.exit(main())
