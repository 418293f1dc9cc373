"""Perch CLI — route table inspection.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — controller/action routing for server-side MVC applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match order")
    routes_parser.add_argument(
        "entry_path",
        nargs="?",
        default=".",
        help="Application directory (default: current directory)",
    )
    routes_parser.add_argument(
        "--routes",
        default=None,
        help="Routes file (default: <entry_path>/app/routes.py)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
