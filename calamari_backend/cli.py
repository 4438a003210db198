#!/usr/bin/env python3
"""
Calamari Backend - CLI Management Tool

Manages the cluster catalog and runs read-only queries and raw commands
against a cluster's Calamari API.
"""

import argparse
import asyncio
import sys
from typing import Any, Awaitable, Callable, Optional

from colorama import Fore, Style, init as colorama_init
from tabulate import tabulate

from calamari_backend.calamari.backend import CalamariBackend
from calamari_backend.calamari.errors import CalamariError
from calamari_backend.core.config import Settings, get_settings


class Colors:
    """Color codes for terminal output."""

    def __init__(self):
        if sys.stdout.isatty():
            colorama_init(autoreset=True)
            self.GREEN = Fore.GREEN
            self.RED = Fore.RED
            self.YELLOW = Fore.YELLOW
            self.BLUE = Fore.BLUE
            self.CYAN = Fore.CYAN
            self.BOLD = Style.BRIGHT
            self.RESET = Style.RESET_ALL
        else:
            # No colors when piped
            self.GREEN = ""
            self.RED = ""
            self.YELLOW = ""
            self.BLUE = ""
            self.CYAN = ""
            self.BOLD = ""
            self.RESET = ""


colors = Colors()


def print_error(message: str):
    """Print error message."""
    print(f"{colors.RED}Error: {message}{colors.RESET}", file=sys.stderr)


def print_success(message: str):
    """Print success message."""
    print(f"{colors.GREEN}{message}{colors.RESET}")


def print_info(message: str):
    """Print info message."""
    print(f"{colors.BLUE}{message}{colors.RESET}")


def format_boolean(value: Optional[bool]) -> str:
    """Format boolean value for display."""
    if value is None:
        return "-"
    if value:
        return f"{colors.GREEN}Yes{colors.RESET}"
    return f"{colors.RED}No{colors.RESET}"


def run_remote(backend: CalamariBackend, call: Callable[[], Awaitable[Any]]) -> Any:
    """Run a backend coroutine and close the HTTP client afterwards."""

    async def runner():
        try:
            return await call()
        finally:
            await backend.close()

    return asyncio.run(runner())


# Command handlers

def cmd_init_db(args, backend: CalamariBackend):
    """Handle init-db command."""
    backend.catalog.init_db()
    print_success(f"Cluster catalog initialized at {backend.catalog.db_path}")


def cmd_add_cluster(args, backend: CalamariBackend):
    """Handle add-cluster command."""
    descriptor = backend.catalog.add_cluster(args.name, args.id)
    print_success(f"Cluster '{descriptor.name}' registered with id {descriptor.cluster_id}")


def cmd_list_clusters(args, backend: CalamariBackend):
    """Handle list-clusters command."""
    clusters = backend.catalog.list_clusters()

    if not clusters:
        print_info("No clusters registered.")
        return

    table_data = [[c.name, str(c.cluster_id)] for c in clusters]
    print()
    print(tabulate(table_data, headers=["Name", "Cluster ID"], tablefmt="grid"))
    print()
    print(f"Total: {len(clusters)} cluster(s)")
    print()


def cmd_remove_cluster(args, backend: CalamariBackend):
    """Handle remove-cluster command."""
    if args.confirm != "DELETE":
        print_error("You must pass --confirm DELETE to remove a cluster")
        sys.exit(1)

    if not backend.catalog.remove_cluster(args.name):
        print_error(f"Cluster '{args.name}' not found")
        sys.exit(1)

    print_success(f"Cluster '{args.name}' removed.")


def cmd_resolve(args, backend: CalamariBackend):
    """Handle resolve command."""
    print(backend.catalog.lookup(args.name))


def cmd_pools(args, backend: CalamariBackend):
    """Handle pools command."""
    pools = run_remote(backend, lambda: backend.get_pools(args.mon, args.cluster_id))

    if not pools:
        print_info("No pools found.")
        return

    table_data = [
        [p.id, p.name, p.size, p.pg_num, p.quota_max_objects, p.quota_max_bytes]
        for p in pools
    ]
    headers = ["ID", "Name", "Size", "PGs", "Max Objects", "Max Bytes"]
    print()
    print(tabulate(table_data, headers=headers, tablefmt="grid"))
    print()


def cmd_osds(args, backend: CalamariBackend):
    """Handle osds command."""
    osds = run_remote(backend, lambda: backend.get_osds(args.mon, args.cluster_id))

    if not osds:
        print_info("No OSDs found.")
        return

    table_data = [
        [o.id, o.server or "-", format_boolean(o.up), format_boolean(o.in_), o.reweight]
        for o in osds
    ]
    headers = ["ID", "Server", "Up", "In", "Reweight"]
    print()
    print(tabulate(table_data, headers=headers, tablefmt="grid"))
    print()


def cmd_pg_count(args, backend: CalamariBackend):
    """Handle pg-count command."""
    counts = run_remote(backend, lambda: backend.get_pg_count(args.mon, args.cluster_id))

    print()
    print(tabulate(
        [[colors.RED + "critical" + colors.RESET, counts["critical"]],
         [colors.YELLOW + "warn" + colors.RESET, counts["warn"]],
         [colors.GREEN + "ok" + colors.RESET, counts["ok"]]],
        headers=["Severity", "PGs"],
        tablefmt="grid",
    ))
    print()


def cmd_exec(args, backend: CalamariBackend):
    """Handle exec command."""
    command = " ".join(args.cmd)
    _, out = run_remote(backend, lambda: backend.exec_cmd(args.mon, args.cluster_id, command))
    print(out)


COMMANDS = {
    "init-db": cmd_init_db,
    "add-cluster": cmd_add_cluster,
    "list-clusters": cmd_list_clusters,
    "remove-cluster": cmd_remove_cluster,
    "resolve": cmd_resolve,
    "pools": cmd_pools,
    "osds": cmd_osds,
    "pg-count": cmd_pg_count,
    "exec": cmd_exec,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="calamari-backend",
        description="Calamari Backend - CLI Management Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config',
        help='Path to config.yaml file',
        default=None,
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('init-db', help='Initialize the cluster catalog')

    add_parser = subparsers.add_parser('add-cluster', help='Register a cluster')
    add_parser.add_argument('--name', required=True, help='Cluster name')
    add_parser.add_argument('--id', required=True, help='Cluster fsid (UUID)')

    subparsers.add_parser('list-clusters', help='List registered clusters')

    remove_parser = subparsers.add_parser('remove-cluster', help='Remove a cluster')
    remove_parser.add_argument('--name', required=True, help='Cluster name')
    remove_parser.add_argument(
        '--confirm',
        required=True,
        help='Must type "DELETE" to confirm',
    )

    resolve_parser = subparsers.add_parser('resolve', help='Print the fsid of a cluster')
    resolve_parser.add_argument('--name', required=True, help='Cluster name')

    for name, help_text in (
        ('pools', 'List pools'),
        ('osds', 'List OSDs'),
        ('pg-count', 'Show placement groups per health severity'),
        ('exec', 'Run a raw ceph command'),
    ):
        remote_parser = subparsers.add_parser(name, help=help_text)
        remote_parser.add_argument('--mon', required=True, help='Monitor host')
        remote_parser.add_argument('--cluster-id', required=True, help='Cluster fsid')
        if name == 'exec':
            remote_parser.add_argument('cmd', nargs='+', help='Command, e.g. osd pool ls')

    return parser


def main(argv: Optional[list] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings = Settings.load_from_yaml(args.config) if args.config else get_settings()
    backend = CalamariBackend.from_settings(settings)

    try:
        COMMANDS[args.command](args, backend)
    except CalamariError as e:
        print_error(e.message)
        sys.exit(1)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
