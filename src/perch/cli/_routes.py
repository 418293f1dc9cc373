"""``perch routes`` — list routes in match order.

Builds the route table from an application's routes file and prints
each route's pattern, target, and extra metadata.
"""

import argparse
import sys

from perch.config import RouterConfig
from perch.errors import ConfigurationError
from perch.routing.router import Router

_TARGET_KEYS = frozenset({"controller", "action", "redirect"})


def run_routes(args: argparse.Namespace) -> None:
    """Print a PATTERN / TARGET / EXTRA table for ``args.entry_path``."""
    config = RouterConfig(entry_path=args.entry_path, routes_path=args.routes)
    router = Router(config)
    try:
        routes = router.build_routes()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    # Build rows: (pattern, target, extra)
    rows: list[tuple[str, str, str]] = []
    for pattern, meta, _handler in routes:
        if "redirect" in meta:
            target = f"-> {meta['redirect']}"
        else:
            target = f"{meta['controller']}#{meta['action']}"
        extra = ", ".join(f"{k}={v}" for k, v in meta.items() if k not in _TARGET_KEYS)
        rows.append((pattern, target, extra))

    # Column widths
    max_pattern = max(max(len(r[0]) for r in rows), 7)  # "PATTERN" header
    max_target = max(max(len(r[1]) for r in rows), 6)  # "TARGET" header

    fmt = f"{{:<{max_pattern}}}  {{:<{max_target}}}  {{}}"
    print(fmt.format("PATTERN", "TARGET", "EXTRA").rstrip())
    sep_len = max_pattern + max_target + 4 + max((len(r[2]) for r in rows), default=0)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
