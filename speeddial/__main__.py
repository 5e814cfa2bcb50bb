"""CLI entry point: sd save|delete|get|list|export|<key> ..."""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from speeddial.models import Context

SAVE = "save"
DELETE = "delete"
GET = "get"
LIST = "list"
EXPORT = "export"
HELP_WORDS = ("help", "-h", "--help")
VERBOSE_FLAGS = ("-v", "--verbose")

DESCRIPTION = (
    "Speed dial: a CLI intended to help you remember and faster execute "
    "commands you typically write, over and over again."
)
EPILOG = (
    "Run a saved command with: sd <key> [args...]\n"
    "Placeholders {1} {2} take positional args in order; {N|default} "
    "falls back to default when no arg is left."
)

SAVE_VALUE_HELP = (
    "Command to map the key to. White space is not allowed in the key. "
    "Escape shell specials with \\ so they reach the stored command "
    "(e.g. sd save ex 'for i in {a,b}; do echo $\\i; done'). "
    "Placeholders: sd save greet 'echo {1} {2|world}' then sd greet hello"
)


class UsageError(Exception):
    """Bad command-line usage, reported instead of exiting the process."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def _error(ctx: Context, msg: str) -> None:
    ctx.output.error(f"Error: {msg}")


def _load(ctx: Context, *, require_file: bool, strict: bool = True) -> dict[str, str] | None:
    """Load the store for a command, reporting problems. None means fail."""
    from speeddial.state import StoreError, keys_file_exists, load_keys

    path = ctx.settings.keys_path
    if require_file and not keys_file_exists(path):
        _error(ctx, f"no speed dial keys found at {path}. Save one with: sd save <key> <command>")
        return None
    try:
        return load_keys(path=path, strict=strict)
    except StoreError as exc:
        _error(ctx, str(exc))
        return None


def cmd_save(args: argparse.Namespace, ctx: Context) -> int:
    from speeddial.state import InvalidEntryError, StoreError, save_entry, validate_entry
    from speeddial.template_engine import is_valid_template

    key = args.key
    value = " ".join(args.value)
    try:
        validate_entry(key, value)
    except InvalidEntryError as exc:
        _error(ctx, str(exc))
        ctx.output.error(args.parser.format_usage().rstrip())
        return 1

    if not is_valid_template(value):
        ctx.output.error(
            f'cannot save key: "{key}", value: "{value}" '
            "contains default argument preceding regular argument"
        )
        return 1

    mapping = _load(ctx, require_file=False)
    if mapping is None:
        return 1
    try:
        save_entry(mapping, key, value, path=ctx.settings.keys_path)
    except StoreError as exc:
        _error(ctx, str(exc))
        return 1

    ctx.output.echo(f"Saved key {key} as value: {value}")
    return 0


def cmd_delete(args: argparse.Namespace, ctx: Context) -> int:
    from speeddial.state import StoreError, UnknownKeyError, delete_entry

    key = args.key
    if not key:
        ctx.output.error(args.parser.format_usage().rstrip())
        return 1

    mapping = _load(ctx, require_file=True)
    if mapping is None:
        return 1
    try:
        delete_entry(mapping, key, path=ctx.settings.keys_path)
    except UnknownKeyError:
        ctx.output.error(f"cannot execute command: {DELETE}, unknown key {key}")
        return 1
    except StoreError as exc:
        _error(ctx, str(exc))
        return 1

    ctx.output.echo(f"deleted the key: {key} from speed dial keys")
    return 0


def cmd_get(args: argparse.Namespace, ctx: Context) -> int:
    if args.get_key == args.get_val:
        _error(ctx, "exactly one of --key or --val is required")
        ctx.output.error(args.parser.format_usage().rstrip())
        return 1

    mapping = _load(ctx, require_file=True)
    if mapping is None:
        return 1

    entities = list(mapping) if args.get_key else list(mapping.values())
    ctx.output.echo(" ".join(sorted(entities)))
    return 0


def cmd_list(args: argparse.Namespace, ctx: Context) -> int:
    from speeddial.table import render_table

    mapping = _load(ctx, require_file=False, strict=False)
    if mapping is None:
        return 1

    width = ctx.terminal_width()
    ctx.output.echo(render_table(mapping, full_width=args.long, terminal_width=width).rstrip("\n"))
    return 0


def cmd_export(args: argparse.Namespace, ctx: Context) -> int:
    from speeddial.export import export_aliases, transfer_keys
    from speeddial.state import keys_file_exists

    if args.to_alias:
        mapping = _load(ctx, require_file=True)
        if mapping is None:
            return 1
        alias_path = ctx.settings.alias_path
        try:
            export_aliases(mapping, alias_path)
        except OSError as exc:
            _error(ctx, f"could not write {alias_path}: {exc}")
            return 1
        ctx.output.echo(f"Wrote speed-dial content to {alias_path} as BASH aliases")
        return 0

    if bool(args.ip) == bool(args.ssh):
        _error(ctx, "exactly one of --ip or --ssh is required")
        ctx.output.error(args.parser.format_usage().rstrip())
        return 1

    keys_path = ctx.settings.keys_path
    if not keys_file_exists(keys_path):
        _error(ctx, f"no speed dial keys found at {keys_path}")
        return 1

    return transfer_keys(
        keys_path,
        ip=args.ip,
        identity_file=args.identity or ctx.settings.identity_path,
        user=args.user or ctx.settings.export.user,
        ssh_alias=args.ssh,
    )


def cmd_execute(key: str, cmd_args: list[str], ctx: Context) -> int:
    from speeddial.state import lookup
    from speeddial.template_engine import InsufficientArgumentsError, resolve

    mapping = _load(ctx, require_file=True)
    if mapping is None:
        return 1

    template, found = lookup(mapping, key)
    if not found:
        ctx.output.error(f'cannot execute command: unknown key "{key}"')
        return 1

    try:
        command = resolve(template, cmd_args)
    except InsufficientArgumentsError as exc:
        ctx.output.error(str(exc))
        return 1

    return ctx.executor.run(command)


def build_parser(ctx: Context) -> tuple[argparse.ArgumentParser, dict[str, argparse.ArgumentParser]]:
    parser = _ArgumentParser(
        prog="sd",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    # -- save --
    p_save = subparsers.add_parser(SAVE, help="Save/update a command as a speed dial key")
    p_save.add_argument("key", nargs="?", default="", help="Key to save (no white space)")
    p_save.add_argument("value", nargs=argparse.REMAINDER, default=[], help=SAVE_VALUE_HELP)
    p_save.set_defaults(func=cmd_save)

    # -- delete --
    p_delete = subparsers.add_parser(DELETE, help="Delete a saved speed dial key")
    p_delete.add_argument("key", nargs="?", default="", help="Key to delete")
    p_delete.set_defaults(func=cmd_delete)

    # -- get --
    p_get = subparsers.add_parser(
        GET,
        help="Get speed dial keys or values as a whitespace separated list "
             "(useful for shell completion)",
    )
    p_get.add_argument("--key", action="store_true", dest="get_key",
                       help="Get keys as a whitespace separated list")
    p_get.add_argument("--val", action="store_true", dest="get_val",
                       help="Get values as a whitespace separated list")
    p_get.set_defaults(func=cmd_get)

    # -- list --
    p_list = subparsers.add_parser(LIST, help="List all dial keys")
    p_list.add_argument("-l", "--long", action="store_true", default=False,
                        help="Do not truncate values to the terminal width")
    p_list.set_defaults(func=cmd_list)

    # -- export --
    p_export = subparsers.add_parser(EXPORT, help="Export your keys file to another location")
    p_export.add_argument("--ip", default=None,
                          help="Destination IP to transfer the keys file to (required if no --ssh)")
    p_export.add_argument("--ssh", default=None,
                          help="SSH alias to transfer to, useful for multi-hop export")
    p_export.add_argument("--id", default=None, dest="identity",
                          help=f"Private key file to use (default: {ctx.settings.export.identity_file})")
    p_export.add_argument("--user", default=None,
                          help=f"Remote user (default: {ctx.settings.export.user or 'current user'})")
    p_export.add_argument("--to-alias", action="store_true", default=False,
                          help=f"Write every key as a shell alias to {ctx.settings.alias_file}")
    p_export.set_defaults(func=cmd_export)

    subcommands = {
        SAVE: p_save, DELETE: p_delete, GET: p_get, LIST: p_list, EXPORT: p_export,
    }
    for sub in subcommands.values():
        sub.set_defaults(parser=sub)
    return parser, subcommands


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _make_context() -> Context:
    from speeddial.config import load_settings

    try:
        settings = load_settings()
    except yaml.YAMLError as exc:
        raise ValueError(str(exc)) from exc
    return Context(settings=settings)


def main(argv: list[str] | None = None, ctx: Context | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    verbose = False
    while argv and argv[0] in VERBOSE_FLAGS:
        verbose = True
        argv = argv[1:]
    _setup_logging(verbose)

    if ctx is None:
        try:
            ctx = _make_context()
        except ValueError as exc:
            print(f"Error: invalid settings: {exc}", file=sys.stderr)
            return 1

    parser, subcommands = build_parser(ctx)

    if not argv:
        ctx.output.error("A subcommand or execution key is required")
        ctx.output.error(parser.format_help().rstrip())
        return 1

    head = argv[0]
    if head in HELP_WORDS:
        ctx.output.echo(parser.format_help().rstrip())
        return 0

    sub = subcommands.get(head)
    if sub is None:
        return cmd_execute(head, argv[1:], ctx)

    rest = argv[1:]
    if head == SAVE:
        # only the key slot; the command itself may contain help words
        rest = rest[:1]
    if any(a in HELP_WORDS for a in rest):
        ctx.output.echo(sub.format_help().rstrip())
        return 0

    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        ctx.output.error(sub.format_usage().rstrip())
        _error(ctx, str(exc))
        return 1
    return args.func(args, ctx)


if __name__ == "__main__":
    sys.exit(main())
