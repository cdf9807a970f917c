"""CLI for pwservice: generate, validate, serve the HTTP API, show request history."""

import argparse
import logging
import sys

from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import load_config
from .errors import PasswordServiceError
from .evaluator import ValidationRequirements, validate_password
from .generator import GenerationOptions, generate_multiple
from .hashing import hasher_from_config
from .repository import PasswordRepository

# soft wrap so long passwords are never split across lines
console = Console(soft_wrap=True, highlight=False)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def cmd_generate(args, cfg):
    opts = GenerationOptions(
        length=args.length,
        include_upper=not args.no_upper,
        include_lower=not args.no_lower,
        include_digits=not args.no_digits,
        include_symbols=not args.no_symbols,
        avoid_ambiguous=args.avoid_ambiguous,
        exclude_chars=args.exclude,
        require_each_category=not args.no_require_each,
    )
    for i, pw in enumerate(generate_multiple(args.count, opts)):
        console.print(f"[bold green]Password #{i+1}:[/bold green] {escape(pw)}")
    return 0


def cmd_validate(args, cfg):
    reqs = ValidationRequirements(
        min_length=args.min_length,
        require_uppercase=args.require_upper,
        require_numbers=args.require_numbers,
        require_symbols=args.require_symbols,
    )
    result = validate_password(args.password, reqs)
    colour = "green" if result.is_valid else "red"
    verdict = "meets the requirements" if result.is_valid else "does NOT meet the requirements"
    print(Panel(
        f"[{colour}]Password {verdict}.[/{colour}]",
        title=f"Score: {result.score} / 100 ({result.strength})",
    ))
    if result.failures:
        print("[bold]Failures:[/bold]")
        for f in result.failures:
            print(f" • {f}")
    return 0 if result.is_valid else 1


def cmd_serve(args, cfg):
    from .web import create_app

    if args.db:
        cfg["db_path"] = args.db
    host = args.host or cfg["host"]
    port = args.port or int(cfg["port"])
    app = create_app(cfg)
    logging.getLogger(__name__).info("Serving on http://%s:%d (db: %s)", host, port, cfg["db_path"])
    app.run(host=host, port=port, threaded=True)
    return 0


def cmd_history(args, cfg):
    repo = PasswordRepository.open(args.db or cfg["db_path"], hasher_from_config(cfg))
    try:
        rows = repo.recent_requests(args.limit)
    finally:
        repo.close()
    if not rows:
        print("[yellow]No generation requests logged yet.[/yellow]")
        return 0
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", width=6)
    table.add_column("When")
    table.add_column("Length")
    table.add_column("Sets")
    table.add_column("No ambiguous")
    table.add_column("Count")
    for r in rows:
        sets = "".join(flag for flag, on in (
            ("A", r["include_uppercase"]),
            ("a", r["include_lowercase"]),
            ("9", r["include_numbers"]),
            ("#", r["include_symbols"]),
        ) if on)
        table.add_row(
            str(r["id"]), r["created_at"], str(r["length"]), sets,
            "yes" if r["exclude_ambiguous"] else "no", str(r["count"]),
        )
    print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pwservice")
    parser.add_argument("--config", type=str, help="Path to a JSON config file")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate one or more passwords")
    gen.add_argument("--length", type=int, default=16, help="Password length (4-128)")
    gen.add_argument("--count", type=int, default=1, help="How many passwords to generate (1-100)")
    gen.add_argument("--no-symbols", action="store_true", help="Disable symbols")
    gen.add_argument("--no-upper", action="store_true", help="Disable uppercase")
    gen.add_argument("--no-lower", action="store_true", help="Disable lowercase")
    gen.add_argument("--no-digits", action="store_true", help="Disable digits")
    gen.add_argument("--avoid-ambiguous", action="store_true", help="Leave out I, l, 1, O, 0, o")
    gen.add_argument("--exclude", type=str, default="", help="Characters to leave out")
    gen.add_argument("--no-require-each", action="store_true",
                     help="Do not force one character from every enabled set")
    gen.set_defaults(func=cmd_generate)

    val = sub.add_parser("validate", help="Check a password against requirements")
    val.add_argument("password", type=str, help="Password to check (wrap in quotes)")
    val.add_argument("--min-length", type=int, default=8, help="Minimum length")
    val.add_argument("--require-upper", action="store_true", help="Require an uppercase letter")
    val.add_argument("--require-numbers", action="store_true", help="Require a digit")
    val.add_argument("--require-symbols", action="store_true", help="Require a symbol")
    val.set_defaults(func=cmd_validate)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", type=str, help="Bind address")
    srv.add_argument("--port", type=int, help="Port")
    srv.add_argument("--db", type=str, help="Path to the sqlite log database")
    srv.set_defaults(func=cmd_serve)

    hist = sub.add_parser("history", help="Show recent generation requests")
    hist.add_argument("--db", type=str, help="Path to the sqlite log database")
    hist.add_argument("--limit", type=int, default=20, help="How many rows to show")
    hist.set_defaults(func=cmd_history)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_config(args.config)
    except ValidationError as e:
        print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        return 2
    configure_logging(cfg.get("log_level") or "INFO")
    try:
        return args.func(args, cfg)
    except PasswordServiceError as e:
        print(f"[red]{escape(e.message)}[/red]")
        return 2


if __name__ == "__main__":
    sys.exit(main())
