"""Command line entry point: take one VOC reading and print it."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .errors import AirSensorError
from .models import DeviceSelector, SensorConfig
from .sensor.session import read_voc
from .transport.pyusb import PyUsbAdapter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _selector(text: str) -> DeviceSelector:
    try:
        return DeviceSelector.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    defaults = SensorConfig()
    p = argparse.ArgumentParser(
        prog="airsensor",
        description="Read the VOC concentration from a USB air quality sensor",
    )
    p.add_argument('--device', type=_selector, default=defaults.selector,
                   help='Device to which to connect, vendor:product (default %(default)s)')
    p.add_argument('--config', type=int, default=defaults.configuration,
                   help='USB configuration value (default %(default)s)')
    p.add_argument('--interface', type=int, default=defaults.interface,
                   help='Interface number to claim (default %(default)s)')
    p.add_argument('--setup', type=int, default=defaults.alt_setting,
                   help='Alternate setting of the interface (default %(default)s)')
    p.add_argument('--endpoint', type=int, default=defaults.endpoint,
                   help='IN endpoint number to read from (default %(default)s)')
    p.add_argument('--write-endpoint', type=int, default=defaults.write_endpoint,
                   help='OUT endpoint number to write to (default %(default)s)')
    p.add_argument('--debug', type=int, default=defaults.debug, choices=range(5),
                   help='Debug level for libusb, 0-4 (default %(default)s)')
    p.add_argument('--timeout', type=int, default=defaults.timeout_ms,
                   help='Transfer timeout in ms, 0 waits forever (default: PyUSB default)')
    p.add_argument('--unique', action='store_true',
                   help='Fail instead of picking the first of several matching devices')
    p.add_argument('--log-level', default='INFO',
                   choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                   help='Log level (default %(default)s)')
    return p


def config_from_args(args: argparse.Namespace) -> SensorConfig:
    return SensorConfig(
        selector=args.device,
        configuration=args.config,
        interface=args.interface,
        alt_setting=args.setup,
        endpoint=args.endpoint,
        write_endpoint=args.write_endpoint,
        debug=args.debug,
        timeout_ms=args.timeout,
        require_unique=args.unique,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    # One USB context per run, always closed.
    with PyUsbAdapter(timeout_ms=config.timeout_ms) as adapter:
        adapter.set_debug(config.debug)
        try:
            reading = read_voc(adapter, config)
        except AirSensorError as e:
            logger.error("%s", e)
            return EXIT_FAILURE

    print(reading.describe())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
