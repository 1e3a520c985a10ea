# CLI interface for mcpmgr
import argparse
import json
import logging
import sys
from pathlib import Path

from mcpmgr import __version__
from mcpmgr.commands import Commands
from mcpmgr.errors import ManagerError, PartialFailure, SyncAborted
from mcpmgr.models import BatchResult, ServerEntry, SseTransport, StdioTransport
from mcpmgr.sync import stats
from mcpmgr.utils import to_display, validate_entry

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

logger = logging.getLogger(__name__)


def _parse_pairs(value: str | None) -> dict[str, str]:
    """Parse comma-separated KEY=VALUE pairs."""
    pairs: dict[str, str] = {}
    if not value:
        return pairs
    for pair in value.split(","):
        if "=" in pair:
            key, val = pair.split("=", 1)
            pairs[key.strip()] = val.strip()
    return pairs


def _print_batch(result: BatchResult, verb: str) -> int:
    for tool in result.succeeded:
        print(f"  {tool} - {verb}")
    for tool, message in result.failed.items():
        print(f"  {tool} - failed: {message}")
    print()
    if result.failed:
        print(f"{result.completed} succeeded, {len(result.failed)} failed")
        return EXIT_PARTIAL
    print(f"{result.completed} tool(s) updated")
    return EXIT_SUCCESS


def _print_entry(entry: ServerEntry) -> None:
    state = "enabled" if entry.enabled else "disabled"
    print(f"  {entry.name} ({entry.kind}, {state})")
    if isinstance(entry.transport, StdioTransport):
        print(f"    command: {entry.transport.command}")
        if entry.transport.args:
            print(f"    args: {' '.join(entry.transport.args)}")
    else:
        print(f"    url: {entry.transport.url}")
    if entry.env:
        env_str = ", ".join(f"{k}={v}" for k, v in entry.env.items())
        print(f"    env: {env_str}")


def cmd_tools(commands: Commands, args: argparse.Namespace) -> int:
    """List supported tools and where their configs live."""
    for tool in commands.registry.list_tools():
        marker = "✓" if tool.exists else "✗"
        custom = " (custom)" if tool.is_custom_path else ""
        print(f"  {marker} {tool.name:<16} {tool.display_name:<18} {tool.path}{custom}")
    return EXIT_SUCCESS


def cmd_list(commands: Commands, args: argparse.Namespace) -> int:
    """List servers of one tool, or the grouped view of all tools.

    ABOUTME: Without a tool, shows one row per server name plus totals
    """
    if args.tool:
        entries = commands.store.list(args.tool)
        print(f"MCP Servers in {commands.registry.resolve_path(args.tool)}:")
        print()
        for entry in entries:
            _print_entry(entry)
            print()
        print(f"Total: {len(entries)} server(s)")
        return EXIT_SUCCESS

    configs, errors = commands.store.list_all()
    for group in commands.syncer.grouped(configs):
        state = "enabled" if group.enabled else "disabled"
        print(f"  {group.name:<24} {state:<9} {', '.join(group.tools)}")

    summary = stats(configs)
    print()
    print(f"Total: {summary['total']} server(s), {summary['active']} active, {summary['tools']} tool(s)")

    if errors:
        print()
        for tool, error in errors.items():
            print(f"  Error: {tool}: {error}")
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def cmd_add(commands: Commands, args: argparse.Namespace) -> int:
    """Add or update a server in one tool."""
    if bool(args.command) == bool(args.url):
        print("Error: give exactly one of --command (stdio) or --url (sse).")
        return EXIT_CONFIG_ERROR

    if args.command:
        transport = StdioTransport(
            command=args.command,
            args=args.args.split(",") if args.args else [],
        )
    else:
        transport = SseTransport(url=args.url)

    entry = ServerEntry(
        name=args.name,
        transport=transport,
        env=_parse_pairs(args.env),
        enabled=not args.disabled,
    )

    for issue in validate_entry(entry, check_commands=True):
        if issue.severity == "warning":
            print(f"  Warning: {issue.message}")

    if args.no_replace:
        commands.store.add(args.tool, entry)
    else:
        commands.store.upsert(args.tool, entry)
    print(f"Server '{entry.name}' saved to {args.tool}.")
    return EXIT_SUCCESS


def cmd_remove(commands: Commands, args: argparse.Namespace) -> int:
    """Remove a server from one tool or from every tool."""
    if args.all_tools:
        print(f"Removing server '{args.name}' from all tools...")
        return _print_batch(commands.syncer.delete_group(args.name), "removed")

    commands.store.delete(args.tool, args.name)
    print(f"Server '{args.name}' removed from {args.tool}.")
    return EXIT_SUCCESS


def cmd_rename(commands: Commands, args: argparse.Namespace) -> int:
    """Rename a server within one tool, keeping its position."""
    commands.store.rename(args.tool, args.old_name, args.new_name)
    print(f"Server '{args.old_name}' renamed to '{args.new_name}' in {args.tool}.")
    return EXIT_SUCCESS


def cmd_toggle(commands: Commands, args: argparse.Namespace) -> int:
    """Enable/disable a server in one tool or across every tool."""
    if args.all_tools:
        print(f"Toggling server '{args.name}' in all tools...")
        return _print_batch(commands.syncer.toggle_group(args.name), "toggled")

    entry = commands.store.toggle_enabled(args.tool, args.name)
    state = "enabled" if entry.enabled else "disabled"
    print(f"Server '{args.name}' in {args.tool} is now {state}.")
    return EXIT_SUCCESS


def cmd_sync(commands: Commands, args: argparse.Namespace) -> int:
    """Copy servers from one tool to another."""
    names = args.names or None
    try:
        synced = commands.syncer.sync(args.source, args.target, names)
    except SyncAborted as e:
        print(f"Error: {e}")
        return EXIT_PARTIAL if e.synced else EXIT_FATAL
    print(f"Synced {synced} server(s) from {args.source} to {args.target}.")
    return EXIT_SUCCESS


def cmd_backup(commands: Commands, args: argparse.Namespace) -> int:
    """Backup subcommands: create, list, restore, delete, prune."""
    backups = commands.backups

    if args.backup_command == "create":
        backup = backups.create()
        print(f"Backup created: {backup.filename}")
    elif args.backup_command == "list":
        items = backups.list()
        for backup in items:
            print(f"  {backup.id:<26} {to_display(backup.id)}")
        print()
        print(f"Total: {len(items)} backup(s)")
    elif args.backup_command == "restore":
        restored = backups.restore(args.backup, args.tools or None)
        print(f"Restored {len(restored)} tool(s): {', '.join(restored)}")
    elif args.backup_command == "delete":
        backups.delete(args.backup)
        print(f"Deleted backup {args.backup}")
    elif args.backup_command == "prune":
        deleted = backups.prune(args.keep)
        print(f"Deleted {len(deleted)} old backup(s)")
    return EXIT_SUCCESS


def cmd_export(commands: Commands, args: argparse.Namespace) -> int:
    document = commands.transfer.export()
    text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Exported {len(document['tools'])} tool(s) to {args.output}")
    else:
        sys.stdout.write(text)
    return EXIT_SUCCESS


def cmd_import(commands: Commands, args: argparse.Namespace) -> int:
    try:
        with open(args.file, encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args.file}: {e}")
        return EXIT_CONFIG_ERROR

    result = commands.transfer.import_(document, merge=args.merge)
    return _print_batch(result, "merged" if args.merge else "replaced")


def cmd_set_path(commands: Commands, args: argparse.Namespace) -> int:
    commands.registry.set_custom_path(args.tool, args.path)
    print(f"{args.tool} config path: {commands.registry.resolve_path(args.tool)}")
    return EXIT_SUCCESS


def cmd_call(commands: Commands, args: argparse.Namespace) -> int:
    """Invoke a command-facade operation with JSON arguments, print the JSON envelope."""
    try:
        call_args = json.loads(args.json) if args.json else {}
    except json.JSONDecodeError as e:
        print(f"Error: invalid JSON arguments: {e}")
        return EXIT_CONFIG_ERROR
    if not isinstance(call_args, dict):
        print("Error: JSON arguments must be an object")
        return EXIT_CONFIG_ERROR

    envelope = commands.invoke(args.operation, **call_args)
    print(json.dumps(envelope, indent=2, ensure_ascii=False))
    return EXIT_SUCCESS if envelope["ok"] else EXIT_CONFIG_ERROR


COMMANDS = {
    "tools": cmd_tools,
    "list": cmd_list,
    "add": cmd_add,
    "remove": cmd_remove,
    "rename": cmd_rename,
    "toggle": cmd_toggle,
    "sync": cmd_sync,
    "backup": cmd_backup,
    "export": cmd_export,
    "import": cmd_import,
    "set-path": cmd_set_path,
    "call": cmd_call,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcpmgr",
        description="Manage MCP server configs across AI coding tools"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mcpmgr v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--app-dir",
        type=Path,
        help="Settings/backup directory (default: ~/.mcp-manager or $MCP_MANAGER_HOME)"
    )

    subparsers = parser.add_subparsers(dest="cmd", help="Available commands")

    subparsers.add_parser("tools", help="List supported tools and config paths")

    list_parser = subparsers.add_parser("list", help="List servers (grouped across tools if no tool given)")
    list_parser.add_argument("tool", nargs="?", help="Tool name")

    add_parser = subparsers.add_parser("add", help="Add or update a server in a tool")
    add_parser.add_argument("tool", help="Tool name")
    add_parser.add_argument("name", help="Server name")
    add_parser.add_argument("--command", help="Command to run (stdio)")
    add_parser.add_argument("--args", help="Comma-separated arguments (stdio)")
    add_parser.add_argument("--url", help="Server URL (sse)")
    add_parser.add_argument("--env", help="Comma-separated KEY=VALUE environment variables")
    add_parser.add_argument("--disabled", action="store_true", help="Add the server disabled")
    add_parser.add_argument("--no-replace", action="store_true", help="Fail if the name already exists")

    rename_parser = subparsers.add_parser("rename", help="Rename a server in a tool")
    rename_parser.add_argument("tool", help="Tool name")
    rename_parser.add_argument("old_name", help="Current server name")
    rename_parser.add_argument("new_name", help="New server name")

    for name, help_text in (("remove", "Remove a server"), ("toggle", "Enable/disable a server")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("tool", nargs="?", help="Tool name (omit with --all-tools)")
        sub.add_argument("name", help="Server name")
        sub.add_argument("--all-tools", action="store_true", help="Apply to every tool that has the server")

    sync_parser = subparsers.add_parser("sync", help="Copy servers from one tool to another")
    sync_parser.add_argument("source", help="Tool to copy from")
    sync_parser.add_argument("target", help="Tool to copy to")
    sync_parser.add_argument("names", nargs="*", help="Server names (default: all)")

    backup_parser = subparsers.add_parser("backup", help="Manage backups")
    backup_sub = backup_parser.add_subparsers(dest="backup_command", required=True)
    backup_sub.add_parser("create", help="Snapshot all tool configs")
    backup_sub.add_parser("list", help="List backups, newest first")
    restore_parser = backup_sub.add_parser("restore", help="Restore a backup")
    restore_parser.add_argument("backup", help="Backup id or filename")
    restore_parser.add_argument("tools", nargs="*", help="Only restore these tools")
    delete_parser = backup_sub.add_parser("delete", help="Delete a backup")
    delete_parser.add_argument("backup", help="Backup id or filename")
    prune_parser = backup_sub.add_parser("prune", help="Delete old backups")
    prune_parser.add_argument("--keep", type=int, default=5, help="Backups to keep (default 5)")

    export_parser = subparsers.add_parser("export", help="Export all servers as JSON")
    export_parser.add_argument("output", nargs="?", help="Output file (default: stdout)")

    import_parser = subparsers.add_parser("import", help="Import servers from an export file")
    import_parser.add_argument("file", help="Export file")
    import_parser.add_argument("--merge", action="store_true", help="Merge instead of replacing")

    path_parser = subparsers.add_parser("set-path", help="Override a tool's config path ('' resets)")
    path_parser.add_argument("tool", help="Tool name")
    path_parser.add_argument("path", help="Config file path, or '' for the default")

    call_parser = subparsers.add_parser("call", help="Invoke an operation, print the JSON result")
    call_parser.add_argument("operation", choices=Commands.OPERATIONS, help="Operation name")
    call_parser.add_argument("json", nargs="?", help="JSON object of arguments")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Engine errors are reported here; returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if not args.cmd:
        parser.print_help()
        return EXIT_SUCCESS

    if args.cmd in ("remove", "toggle") and not args.all_tools and not args.tool:
        print(f"Error: {args.cmd} needs a tool name or --all-tools")
        return EXIT_CONFIG_ERROR

    if args.cmd not in ("call", "export"):
        print(f"mcpmgr {args.cmd} v{__version__}")
        print()

    commands = Commands(app_dir=args.app_dir)
    try:
        return COMMANDS[args.cmd](commands, args)
    except PartialFailure as e:
        print(f"Error: {e}")
        return EXIT_PARTIAL
    except ManagerError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
