"""
Main entry point for the portclient command line tool.
"""
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from . import configuration
from .errors import ConfigurationError
from .orchestrator import operate_many
from .reporting import ERROR, ConsoleReporter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portclient",
        description="Check which process holds a local port, or kill it.",
    )
    parser.add_argument("ports", nargs="*", help="Ports to operate on; each argument is handled as its own run")
    parser.add_argument("--port", "-p", help="Comma-separated ports, e.g. 3000,8080")
    parser.add_argument("--range", "-r", dest="range", help="Inclusive port range, e.g. 8080-8090")
    parser.add_argument("--method", "-m", choices=["tcp", "udp"], help="Protocol (default: tcp)")
    parser.add_argument("--action", "-a", help="check, exists or kill (default: check)")
    parser.add_argument("--kill", "-k", action="store_true", help="Shorthand for --action kill")
    parser.add_argument("--speed", choices=["safe", "fast"], help="safe: one full listing; fast: one probe per port")
    parser.add_argument("--fast", action="store_true", help="Shorthand for --speed fast")
    parser.add_argument("--interactive", "-i", action="store_true", help="Pick ports from the active ones")
    parser.add_argument("--dry-run", action="store_true", help="Show the ports that would be used and exit")
    parser.add_argument("--graceful", "-g", action="store_true", default=None, help="Send SIGTERM instead of SIGKILL")
    parser.add_argument("--verbose", "-v", action="store_true", default=None, help="Show commands and process names")
    parser.add_argument("--filter", help="Reserved; accepted and ignored")
    parser.add_argument("--config", help=f"Configuration file (default: ${configuration.CONFIG_ENV_VAR} or portclient.yaml)")
    parser.add_argument("--init-config", action="store_true", help="Write a configuration file with the defaults and exit")
    return parser


def build_options(args: argparse.Namespace, defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Layers command line flags over the configured defaults."""
    options = dict(defaults)
    if args.method:
        options['method'] = args.method
    if args.kill:
        options['action'] = 'kill'
    elif args.action:
        options['action'] = args.action
    if args.fast:
        options['speed'] = 'fast'
    elif args.speed:
        options['speed'] = args.speed
    if args.graceful is not None:
        options['graceful'] = args.graceful
    if args.verbose is not None:
        options['verbose'] = args.verbose
    options['interactive'] = args.interactive
    options['dryRun'] = args.dry_run
    options['filter'] = args.filter
    options['range'] = args.range
    return options


def collect_specs(args: argparse.Namespace) -> List[Any]:
    """One spec per run. --port values form a single run; a bare --range is its own run."""
    specs: List[Any] = list(args.ports)
    if args.port:
        specs.append([p for p in args.port.split(',') if p.strip()])
    if not specs and args.range:
        specs.append(None)
    return specs


def main(argv: Optional[List[str]] = None) -> int:
    """Runs the command line tool and returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.init_config:
            path = configuration.save_config(configuration.DEFAULT_CONFIG, args.config)
            print(f"Wrote {path}")
            return 0
        defaults = configuration.load_config(args.config)
    except ConfigurationError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 2

    options = build_options(args, defaults)
    level = logging.DEBUG if options.get('verbose') else logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    specs = collect_specs(args)
    if not specs:
        parser.error("no ports given. Pass ports, --port or --range.")

    reporter = ConsoleReporter(verbose=bool(options.get('verbose')))
    # Prompts from parallel runs would interleave.
    workers = 1 if args.interactive else None
    outcomes = operate_many(specs, options, max_workers=workers, reporter=reporter)

    status = 0
    for outcome in outcomes:
        spec = outcome.spec
        if isinstance(spec, list):
            label = ",".join(spec)
        else:
            label = spec if spec is not None else args.range
        if outcome.error is not None:
            reporter.report(ERROR, f"Could not process on port {label}. {outcome.error}")
            status = 2
        elif not outcome.ok:
            status = max(status, 1)
    return status


def main_entry():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
