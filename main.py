"""Cell Band Inspector CLI.

Command-line front end for the AT engine and the band telemetry extractor.
"""

import argparse
import json
import logging
import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from cellband.config import ConfigManager, Config
from cellband.config.config_models import LogLevel
from cellband.core import (
    SerialHandler,
    ATExecutor,
    ATDiagnosticQuery,
    DbusNetworkOracle,
    CellBandError,
)
from cellband.logging import CommunicationLogger
from cellband.parsers import BandTelemetryExtractor

log = logging.getLogger(__name__)


def discover_ports() -> None:
    """Discover and display available serial ports."""
    print("Discovering serial ports...")
    ports = SerialHandler.discover_ports()

    if not ports:
        print("No serial ports found.")
        return

    print(f"\nFound {len(ports)} port(s):")
    for port in ports:
        print(f"  {port.device}")
        print(f"    Description: {port.description}")
        print(f"    Hardware ID: {port.hwid}")
        print()


def execute_command(
    port: str,
    baud: int,
    command: str,
    config: Config,
    timeout: Optional[float] = None,
    verbose: bool = False,
    logger: Optional[CommunicationLogger] = None
) -> int:
    """Execute a single AT command and print the reply.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        with SerialHandler(port, baud_rate=baud, logger=logger) as handler:
            if verbose:
                print(f"Port {port} opened at {baud} baud")

            executor = build_executor(handler, config, timeout, logger)
            response = executor.execute_command(command)

            print(f"\n{'=' * 60}")
            print(f"Command: {response.command}")
            print(f"Status: {response.status.value}")
            print(f"Execution time: {response.execution_time:.3f}s")
            if response.retry_count > 0:
                print(f"Retries: {response.retry_count}")
            print("\nResponse:")
            print(response.get_response_text())
            print(f"{'=' * 60}\n")

            return 0 if response.is_successful() else 1

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1
    except CellBandError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def build_executor(
    handler: SerialHandler,
    config: Config,
    timeout: Optional[float] = None,
    logger: Optional[CommunicationLogger] = None
) -> ATExecutor:
    """AT engine using the serial retry settings; ``timeout`` overrides serial.timeout."""
    return ATExecutor(
        handler,
        default_timeout=timeout if timeout is not None else float(config.serial.timeout),
        retry_count=config.serial.retry_attempts,
        retry_delay=config.serial.retry_delay / 1000.0,
        logger=logger
    )


def build_extractor(
    handler: SerialHandler,
    config: Config,
    timeout: Optional[float] = None,
    logger: Optional[CommunicationLogger] = None
) -> BandTelemetryExtractor:
    """Wire oracle, diagnostic query and extractor from one config snapshot."""
    executor = build_executor(handler, config, timeout, logger)
    oracle = DbusNetworkOracle(
        destination=config.telemetry.dbus_destination,
        object_path=config.telemetry.dbus_object_path,
        timeout=config.telemetry.oracle_timeout
    )
    query = ATDiagnosticQuery(
        executor,
        timeout=executor.default_timeout,
        retry=config.serial.retry_attempts
    )
    return BandTelemetryExtractor(
        oracle,
        query,
        min_response_length=config.telemetry.min_response_length
    )


def show_current_band(
    port: str,
    baud: int,
    config: Config,
    api_format: bool,
    watch: Optional[float],
    count: Optional[int],
    logger: Optional[CommunicationLogger] = None,
    timeout: Optional[float] = None
) -> int:
    """Print serving-cell band telemetry as JSON, once or every ``watch`` seconds.

    While watching, a configuration reload rebuilds the extractor before the
    next reading. Port and baud rate stay as opened.

    Returns:
        0 once the port is open (unknown telemetry is still a result),
        1 if the port cannot be used
    """
    reloaded = threading.Event()
    try:
        manager: Optional[ConfigManager] = ConfigManager.instance()
        manager.register_reload_callback(reloaded.set)
    except RuntimeError:
        manager = None

    try:
        with SerialHandler(port, baud_rate=baud, logger=logger) as handler:
            extractor = build_extractor(handler, config, timeout, logger)

            iteration = 0
            while True:
                if reloaded.is_set():
                    reloaded.clear()
                    config = manager.get_config()
                    extractor = build_extractor(handler, config, timeout, logger)
                    log.info("Configuration reloaded; telemetry settings applied")

                result = extractor.extract_current_band_telemetry()
                payload = result.to_api_payload() if api_format else result.to_dict()
                print(json.dumps(payload, ensure_ascii=False))
                sys.stdout.flush()

                iteration += 1
                if watch is None or (count is not None and iteration >= count):
                    return 0
                time.sleep(watch)

    except KeyboardInterrupt:
        return 0
    except CellBandError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if manager:
            manager.unregister_reload_callback(reloaded.set)


def build_logger(args: argparse.Namespace, config: Config) -> Optional[CommunicationLogger]:
    """Create the AT traffic logger from --log flags or the logging config section."""
    if not (args.log or config.logging.enabled):
        return None

    log_file_path = args.log_file or config.logging.log_file_path
    if not log_file_path:
        log_dir = Path.home() / ".cellband" / "logs"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_path = str(log_dir / f"comm_{timestamp}.log")

    level = LogLevel[args.log_level] if args.log_level else config.logging.level

    try:
        return CommunicationLogger(
            log_level=level,
            enable_file=args.log or config.logging.log_to_file,
            enable_console=args.log_to_console or config.logging.log_to_console,
            log_file_path=log_file_path,
            max_file_size_mb=config.logging.max_file_size_mb,
            backup_count=config.logging.backup_count
        )
    except (OSError, ValueError) as e:
        print(f"Warning: Failed to initialize logger: {e}", file=sys.stderr)
        return None


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cell Band Inspector - serving-cell band telemetry over AT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --discover-ports
  %(prog)s --port /dev/ttyUSB2 --command "+SPENGMD=0,6,0"
  %(prog)s --port /dev/ttyUSB2 --current-band
  %(prog)s --port /dev/ttyUSB2 --current-band --api-format --watch 5 --count 12
  %(prog)s --port /dev/ttyUSB2 --current-band --log --log-level DEBUG --log-to-console
        """
    )

    parser.add_argument('--discover-ports', action='store_true',
                        help='Discover and list available serial ports')
    parser.add_argument('--port', type=str,
                        help='Modem AT port (default: serial.port from config)')
    parser.add_argument('--baud', type=int,
                        help='Baud rate (default: serial.default_baud from config)')
    parser.add_argument('--command', type=str,
                        help='AT command to execute; "AT" is prepended when missing')
    parser.add_argument('--timeout', type=float,
                        help='Command timeout in seconds (default: serial.timeout from config)')
    parser.add_argument('--current-band', action='store_true',
                        help='Print current serving-cell band telemetry as JSON')
    parser.add_argument('--api-format', action='store_true',
                        help='Wrap telemetry in the router API envelope ({"Code", "Error", "Data"})')
    parser.add_argument('--watch', type=float, metavar='SECONDS',
                        help='Repeat --current-band every SECONDS')
    parser.add_argument('--count', type=int,
                        help='Stop --watch after this many readings')
    parser.add_argument('--config', type=str, metavar='PATH',
                        help='Configuration file (default: ./config.yaml or ~/.cellband/config.yaml)')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable verbose output')

    parser.add_argument('--log', action='store_true',
                        help='Enable AT traffic logging to file')
    parser.add_argument('--log-file', type=str, metavar='PATH',
                        help='Log file (default: ~/.cellband/logs/comm_YYYYMMDD_HHMMSS.log)')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: logging.level from config)')
    parser.add_argument('--log-to-console', action='store_true',
                        help='Also write AT traffic to stderr')

    parser.add_argument('--show-config', action='store_true',
                        help='Show current configuration with sources')
    parser.add_argument('--validate-config', action='store_true',
                        help='Validate configuration')
    parser.add_argument('--generate-config', action='store_true',
                        help='Write default configuration to ./config.yaml')
    parser.add_argument('--force', action='store_true',
                        help='Overwrite existing file (use with --generate-config)')
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    from cellband.config import config_cli

    if args.generate_config:
        return config_cli.generate_config_command(force=args.force)

    try:
        config_path = Path(args.config) if args.config else None
        config = ConfigManager.initialize(
            config_path,
            skip_validation=args.validate_config,
            enable_hot_reload=args.watch is not None
        ).get_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.show_config:
        return config_cli.show_config_command()

    if args.validate_config:
        return config_cli.validate_config_command(args.config)

    if args.discover_ports:
        discover_ports()
        return 0

    if not (args.command or args.current_band):
        parser.print_help()
        return 0

    port = args.port or config.serial.port
    if not port:
        print("Error: --port is required (or set serial.port in config)", file=sys.stderr)
        return 1
    baud = args.baud or config.serial.default_baud

    logger = build_logger(args, config)
    if logger and args.verbose:
        print(f"Logging enabled: {logger.log_file_path}")

    try:
        if args.command:
            return execute_command(port, baud, args.command, config, args.timeout, args.verbose, logger)

        return show_current_band(port, baud, config, args.api_format, args.watch, args.count,
                                 logger, timeout=args.timeout)
    finally:
        if logger:
            logger.close()


if __name__ == '__main__':
    sys.exit(main())
