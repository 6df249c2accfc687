"""
Command-line interface for asnscout.

This module provides the main CLI entry point and argument parsing.
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .colors import ColorScheme, create_ascii_banner
from .core import Config, setup_logging
from .errors import ASNScoutError, ConfigurationError, TransportError
from .inputs import load_input_file
from .output import CSV, JSON, PLAIN, OutputWriter
from .runner import Options, Runner
from .utils import format_duration, validate_ip_address


class ASNScoutCLI:
    """Main CLI application class"""

    def __init__(self):
        self.logger = None
        self.colors = None

    def create_argument_parser(self) -> argparse.ArgumentParser:
        """Create and configure argument parser"""
        parser = argparse.ArgumentParser(
            prog="asnscout",
            description="Map IPs, ASNs, organizations and domains to their ASN ranges.",
            epilog="Example: %(prog)s -a AS14421 -d google.com --json",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )

        input_group = parser.add_argument_group('Input Options')
        input_group.add_argument(
            '-i', '--input', nargs='+', default=[],
            help='Targets of any type, detected automatically'
        )
        input_group.add_argument(
            '-a', '--asn', nargs='+', default=[],
            help='ASNs to look up (e.g. AS14421 or 14421)'
        )
        input_group.add_argument(
            '--ip', nargs='+', default=[],
            help='IP addresses to look up'
        )
        input_group.add_argument(
            '--org', nargs='+', default=[],
            help='Organization names to look up'
        )
        input_group.add_argument(
            '-d', '--domain', nargs='+', default=[],
            help='Domains to resolve and look up'
        )
        input_group.add_argument(
            '-f', '--file',
            help='File with one target per line'
        )

        output_group = parser.add_argument_group('Output Options')
        output_group.add_argument(
            '-o', '--output',
            help='File to write results to'
        )
        format_group = output_group.add_mutually_exclusive_group()
        format_group.add_argument(
            '-j', '--json', action='store_true',
            help='Write results as JSON lines'
        )
        format_group.add_argument(
            '-c', '--csv', action='store_true',
            help='Write results as pipe separated CSV'
        )
        output_group.add_argument(
            '-v6', '--ipv6', action='store_true',
            help='Include IPv6 ranges in output and resolve AAAA records'
        )

        net_group = parser.add_argument_group('Network Options')
        net_group.add_argument(
            '-r', '--resolvers', nargs='+', default=[],
            help='DNS resolvers to use for domain inputs'
        )
        net_group.add_argument(
            '--proxy',
            help='HTTP(S) proxy URL for the lookup service'
        )
        net_group.add_argument(
            '--timeout', type=int, default=Config.REQUEST_TIMEOUT,
            help=f'Lookup request timeout in seconds (default: {Config.REQUEST_TIMEOUT})'
        )
        net_group.add_argument(
            '-t', '--concurrency', type=int, default=Config.DEFAULT_CONCURRENCY,
            help=f'Number of concurrent lookups (default: {Config.DEFAULT_CONCURRENCY})'
        )
        net_group.add_argument(
            '--api-key',
            help=f'Lookup service API key (default: ${Config.API_KEY_ENV})'
        )

        display_group = parser.add_argument_group('Display Options')
        display_group.add_argument(
            '--silent', action='store_true',
            help='Only print results'
        )
        display_group.add_argument(
            '--verbose', action='store_true',
            help='Enable verbose logging (debug level)'
        )
        display_group.add_argument(
            '--no-color', action='store_true',
            help='Disable colorized output'
        )
        display_group.add_argument(
            '--no-banner', action='store_true',
            help='Skip ASCII art banner'
        )
        display_group.add_argument(
            '--progress', action='store_true',
            help='Show a progress bar for lookups'
        )
        display_group.add_argument(
            '--version', action='version', version=f'%(prog)s {__version__}'
        )

        return parser

    def validate_arguments(self, args: argparse.Namespace) -> bool:
        """Validate command line arguments"""
        if args.concurrency < 1:
            self.logger.error("Error: --concurrency must be at least 1")
            return False

        if args.timeout < 1:
            self.logger.error("Error: --timeout must be at least 1 second")
            return False

        for resolver in args.resolvers:
            if not validate_ip_address(resolver):
                self.logger.error(f"Error: resolver '{resolver}' is not an IP address")
                return False

        return True

    def collect_inputs(self, args: argparse.Namespace) -> List[str]:
        """Gather auto-detected targets from -i, -f and piped stdin"""
        inputs = list(args.input)

        if args.file:
            inputs.extend(load_input_file(args.file))

        explicit = args.asn or args.ip or args.org or args.domain
        if not inputs and not explicit and not sys.stdin.isatty():
            inputs.extend(line.strip() for line in sys.stdin if line.strip())

        return inputs

    def build_options(self, args: argparse.Namespace, inputs: List[str]) -> Options:
        return Options(
            ip=args.ip,
            asn=args.asn,
            org=args.org,
            domain=args.domain,
            inputs=inputs,
            concurrency=args.concurrency,
            resolvers=args.resolvers,
            include_ipv6=args.ipv6,
            api_key=args.api_key,
            proxy=args.proxy,
            timeout=args.timeout,
            show_progress=args.progress and not args.silent,
        )

    def show_banner(self):
        """Display ASCII art banner"""
        self.colors.echo(self.colors.highlight(create_ascii_banner(__version__)))
        self.colors.echo("")

    def print_summary(self, runner: Runner, writer: OutputWriter):
        """Print final execution summary"""
        metrics = runner.metrics
        self.colors.echo(
            f"{self.colors.success('✔')} "
            f"{self.colors.info('Queries:')} {self.colors.stat_number(str(len(runner.queries)))}  "
            f"{self.colors.info('Records:')} {self.colors.stat_number(str(metrics.delivered_records))}  "
            f"{self.colors.info('Not found:')} {self.colors.stat_number(str(len(metrics.not_found)))}  "
            f"{self.colors.info('Time:')} {format_duration(metrics.elapsed_time)}"
        )
        if metrics.not_found:
            self.colors.echo(self.colors.dim(f"No results for: {', '.join(metrics.not_found)}"))
        if writer.output_file:
            self.colors.echo(f"{self.colors.success('✔')} {self.colors.info('Output:')} {writer.output_file}")

    def main(self, argv: Optional[List[str]] = None) -> int:
        """Main CLI entry point"""
        parser = self.create_argument_parser()
        args = parser.parse_args(argv)

        self.logger = setup_logging(verbose=args.verbose, quiet=args.silent)
        self.colors = ColorScheme(enabled=not args.no_color)

        if not args.no_banner and not args.silent:
            self.show_banner()

        if not self.validate_arguments(args):
            return 1

        try:
            inputs = self.collect_inputs(args)
        except OSError as e:
            self.logger.error(f"Cannot read input file: {e}")
            return 1

        fmt = JSON if args.json else CSV if args.csv else PLAIN

        try:
            writer = OutputWriter(fmt, output_file=args.output, include_ipv6=args.ipv6)
        except OSError as e:
            self.logger.error(f"Cannot open output file: {e}")
            return 1

        options = self.build_options(args, inputs)
        options.on_result = writer
        try:
            runner = Runner(options)
        except ConfigurationError as e:
            writer.close()
            self.logger.error(f"Configuration error: {e}")
            parser.print_usage(sys.stderr)
            return 1

        # results of domain inputs are shown against the domain, not the resolved IP
        writer.display_input = runner.origin_of

        try:
            with runner, writer:
                runner.prepare_input()
                runner.process()
            if not args.silent:
                self.print_summary(runner, writer)
            return 0

        except KeyboardInterrupt:
            self.logger.warning("Interrupted by user")
            return 130
        except ConfigurationError as e:
            self.logger.error(f"Configuration error: {e}")
            return 1
        except TransportError as e:
            self.colors.echo(self.colors.error(f"❌ Lookup service unreachable: {e}"))
            return 1
        except ASNScoutError as e:
            self.logger.error(f"Unexpected error: {e}")
            if args.verbose:
                import traceback
                self.logger.debug(traceback.format_exc())
            return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI application"""
    cli = ASNScoutCLI()
    return cli.main(argv)


if __name__ == "__main__":
    sys.exit(main())
