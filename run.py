"""floorgen CLI entry point.

Provides subcommands for running the HTTP server, generating a floor to
stdout (JSON, ASCII or a one-line summary) and running structural diagnostics
over a list of seeds. Accepts configuration via flags and FLOORGEN_* environment
variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from dotenv import load_dotenv


def _load_version() -> str:
    from floorgen import __version__

    return __version__


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    floorgen: procedural dungeon floor generator

    Run the HTTP API server, print a generated floor, or check seeds for
    structural defects. Generation defaults come from FLOORGEN_* environment
    variables; CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                 Bind address for the web server (default: 0.0.0.0)
          PORT                 Port for the web server (default: 5000)
          FLOORGEN_<FIELD>     Default for any FloorConfig field (e.g. FLOORGEN_WIDTH=120)
          FLOORGEN_LOG_LEVEL   debug | info | warn | error (default: info)
          FLOORGEN_LOG_JSON    Emit JSON log lines when set to 1

        Examples:
          # Run the server on a custom port
          python run.py server --port 8080

          # Print floor 5 for seed 42 as ASCII with role markers
          python run.py generate --seed 42 --floor-level 5 --format ascii --roles

          # Three consecutive floors, summary lines only
          python run.py generate --seed 7 --floors 3 --format summary

          # Check seeds for structural defects (non-zero exit on any issue)
          python run.py diagnose 1 2 3
        """
    )

    parser = argparse.ArgumentParser(
        prog="floorgen",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"floorgen {_load_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the HTTP API server",
        description="Run the Flask development server exposing /api/floor/*",
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate floor(s) and print them",
        description="Generate one or more consecutive floors and print them to stdout",
    )
    gen_parser.add_argument("--seed", type=int, default=None, help="Seed (default: env FLOORGEN_SEED or random)")
    gen_parser.add_argument("--width", type=int, default=None)
    gen_parser.add_argument("--height", type=int, default=None)
    gen_parser.add_argument("--floor-level", dest="floor_level", type=int, default=None)
    gen_parser.add_argument("--extra-connections", dest="extra_connections", type=int, default=None)
    gen_parser.add_argument("--strict", action="store_true", help="Fail on any structural defect")
    gen_parser.add_argument("--floors", type=int, default=1, help="Number of consecutive floors (default: 1)")
    gen_parser.add_argument(
        "--format",
        dest="fmt",
        choices=("json", "ascii", "summary"),
        default="summary",
        help="Output format (default: summary)",
    )
    gen_parser.add_argument("--roles", action="store_true", help="Mark room roles in ASCII output")
    gen_parser.set_defaults(command="generate")

    diag_parser = subparsers.add_parser(
        "diagnose",
        help="Run structural checks for seeds",
        description="Generate each seed and report structural defects as JSON",
    )
    diag_parser.add_argument("seeds", nargs="*", type=int, help="Seeds to check (default: a built-in list)")
    diag_parser.add_argument("--width", type=int, default=None)
    diag_parser.add_argument("--height", type=int, default=None)
    diag_parser.set_defaults(command="diagnose")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    return parser.parse_args(argv)


def _config_from_args(args):
    from floorgen.generation import FloorConfig

    cfg = FloorConfig.from_env()
    overrides = {}
    for name in ("seed", "width", "height", "floor_level", "extra_connections"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "strict", False):
        overrides["strict"] = True
    return cfg.replace(**overrides) if overrides else cfg


def _cmd_generate(args) -> int:
    from floorgen.generation import GenerationError, generate_floors, to_ascii
    from floorgen.routes.floor_api import summary

    try:
        cfg = _config_from_args(args).validate()
        floors = generate_floors(cfg, max(1, args.floors))
    except GenerationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    for layout in floors:
        if args.fmt == "json":
            print(json.dumps(layout.to_dict()))
        elif args.fmt == "ascii":
            print(to_ascii(layout, mark_roles=args.roles))
            print()
        else:
            print(json.dumps(summary(layout), sort_keys=True))
    return 0


DEFAULT_DIAGNOSE_SEEDS = [1, 7, 42, 1337]


def _cmd_diagnose(args) -> int:
    from floorgen.generation import GenerationFailed
    from floorgen.generation.debug_checks import run_for_seed

    base = _config_from_args(args)
    results = []
    for seed in args.seeds or DEFAULT_DIAGNOSE_SEEDS:
        try:
            results.append(run_for_seed(seed, base))
        except GenerationFailed as e:
            results.append({"seed": seed, "error": str(e), "ok": False})
    print(json.dumps({"results": results}, indent=2))
    return 0 if all(r["ok"] for r in results) else 1


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    from floorgen.logging_utils import log

    if mode == "generate":
        return _cmd_generate(args)
    if mode == "diagnose":
        return _cmd_diagnose(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    log.info(event="listen", host=host, port=port, debug=debug)
    from floorgen.server import start_server

    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
