#!/usr/bin/env python3
"""
SDR Panorama - Command Line Interface

Inspect scan ranges, zoom windows, band plan catalogs and stored
settings without a front end attached.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from . import __version__
from .devices.profile import PREFERRED_STEP_INTERVAL_MS
from .utils.conversions import format_quantity, str_to_freq


def frequency(text: str) -> float:
    """Argument type: frequency with optional unit, bare numbers in MHz."""
    return str_to_freq(text, default_multiplier=1e6)


def hertz(text: str) -> float:
    """Argument type: frequency with optional unit, bare numbers in Hz."""
    return str_to_freq(text)


def _read_json(path: str) -> Any:
    with open(path, "r") as f:
        return json.load(f)


def cmd_info(args: argparse.Namespace) -> int:
    """Display module information."""
    print(f"SDR Panorama v{__version__}")
    print()
    print("Panoramic Spectrum Scanning")
    print("===========================")
    print()
    print("Driver pacing hints:")
    for driver, interval in PREFERRED_STEP_INTERVAL_MS.items():
        print(f"  - {driver}: {interval} ms")
    return 0


def cmd_range(args: argparse.Namespace) -> int:
    """Show the scan range a device and range selection produce."""
    from .core.scan_range import ScanRangeManager
    from .devices.profile import DeviceProfile

    try:
        descriptor = _read_json(args.device)
        if not isinstance(descriptor, dict):
            raise ValueError("descriptor must be a JSON object")
        device = DeviceProfile.from_dict(descriptor)
    except (OSError, ValueError) as e:
        # DeviceProfileError and JSONDecodeError are both ValueErrors
        print(f"Error: cannot load device descriptor: {e}")
        return 1

    manager = ScanRangeManager(lnb_offset_hz=args.lnb)
    if args.start is not None and args.end is not None:
        manager.set_range(args.start, args.end)
    manager.set_full_range_mode(args.full)
    scan_range = manager.apply_device(device)

    interval = device.preferred_step_interval_ms
    print(f"Device:     {device.description} ({device.driver})")
    print(
        f"Range:      {format_quantity(scan_range.min_hz)} - "
        f"{format_quantity(scan_range.max_hz)}"
    )
    print(f"Bandwidth:  {format_quantity(scan_range.bandwidth)}")
    print(f"Demod BW:   +/- {format_quantity(manager.default_demod_half_bandwidth())}")
    print(f"Step:       {interval} ms" if interval else "Step:       (driver default)")
    return 0


def cmd_zoom(args: argparse.Namespace) -> int:
    """Compute the retune window for a zoom request."""
    from .core.scan_range import ScanRange
    from .core.zoom import compute_zoom_window

    start, end = sorted((args.start, args.end))
    try:
        window = compute_zoom_window(
            args.center,
            args.span,
            ScanRange(start, end),
            args.min_bw,
            args.rel_bw,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Window:     {format_quantity(window.min_hz)} - {format_quantity(window.max_hz)}")
    print(f"Span:       {format_quantity(window.span)}")
    print(f"Fixed mode: {'yes' if window.fixed_mode else 'no'}")
    return 0


def cmd_bandplan(args: argparse.Namespace) -> int:
    """List the tables of a band plan catalog."""
    from .core.bandplan import BandPlanOverlay

    try:
        catalog = _read_json(args.catalog)
    except (OSError, ValueError) as e:
        print(f"Error: cannot load catalog: {e}")
        return 1

    if isinstance(catalog, dict):
        catalog = catalog.get("tables", [])
    if not isinstance(catalog, list):
        print("Error: catalog must be a list of tables")
        return 1

    overlay = BandPlanOverlay()
    overlay.load(catalog)

    print(f"Found {len(overlay.tables)} band plan(s):")
    for label, index in overlay.choices()[1:]:
        print(f"  [{index}] {label} ({len(overlay.tables[index])} bands)")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Show the stored panoramic settings, or reset them to defaults."""
    from .core.config import PanoramicConfig
    from .core.scan_range import ScanRange

    path = Path(args.file) if args.file else PanoramicConfig.default_path()

    if args.reset:
        if not PanoramicConfig().save(path):
            print(f"Error: cannot write {path}")
            return 1
        print(f"Default settings written to {path}")
        return 0

    config = PanoramicConfig.load(path)
    if config is None:
        print(f"Error: cannot load settings from {path} (use --reset to create it)")
        return 1

    scan_range = ScanRange(config.range_min, config.range_max, config.lnb_freq)
    print(f"Settings:   {path}")
    print(f"Device:     {config.device or '(none)'}")
    if scan_range.is_invalid or config.full_range:
        print("Range:      (full device range)")
    else:
        print(
            f"Range:      {format_quantity(scan_range.min_hz)} - "
            f"{format_quantity(scan_range.max_hz)}"
        )
    print(f"Rate:       {format_quantity(config.samp_rate, digits=3, units='S/s')}")
    print(f"Walk:       {config.strategy}, {config.partitioning}")
    print(f"Step:       {config.step_interval_ms} ms")
    for device, stage in config.gains:
        print(f"Gain:       {device}.{stage} = {config.gains.get(device, stage):g} dB")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="sdr-panorama",
        description="SDR Panorama - Panoramic spectrum scanning",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Info command
    info_parser = subparsers.add_parser("info", help="Display module information")
    info_parser.set_defaults(func=cmd_info)

    # Range command
    range_parser = subparsers.add_parser("range", help="Show scan range for a device")
    range_parser.add_argument(
        "--device", required=True, help="JSON device descriptor file"
    )
    range_parser.add_argument(
        "--lnb",
        type=hertz,
        default=0.0,
        help="LNB offset, e.g. --lnb=-9.75GHz (default: 0 Hz)",
    )
    range_parser.add_argument(
        "--start", type=frequency, help="Start frequency (MHz unless a unit is given)"
    )
    range_parser.add_argument(
        "--end", type=frequency, help="End frequency (MHz unless a unit is given)"
    )
    range_parser.add_argument(
        "--full", action="store_true", help="Use the full device range"
    )
    range_parser.set_defaults(func=cmd_range)

    # Zoom command
    zoom_parser = subparsers.add_parser("zoom", help="Compute a zoom retune window")
    zoom_parser.add_argument("--start", type=frequency, required=True, help="Scan start")
    zoom_parser.add_argument("--end", type=frequency, required=True, help="Scan end")
    zoom_parser.add_argument("--center", type=frequency, required=True, help="Zoom centre")
    zoom_parser.add_argument("--span", type=frequency, required=True, help="Zoom span")
    zoom_parser.add_argument(
        "--min-bw",
        type=hertz,
        default=8e6,
        help="Receiver bandwidth, Hz unless a unit is given (default: 8MHz)",
    )
    zoom_parser.add_argument(
        "--rel-bw",
        type=float,
        default=0.5,
        help="Relative bandwidth for fixed mode (default: 0.5)",
    )
    zoom_parser.set_defaults(func=cmd_zoom)

    # Band plan command
    bandplan_parser = subparsers.add_parser("bandplan", help="List band plan tables")
    bandplan_parser.add_argument("catalog", help="JSON band plan catalog file")
    bandplan_parser.set_defaults(func=cmd_bandplan)

    # Config command
    config_parser = subparsers.add_parser("config", help="Show stored panoramic settings")
    config_parser.add_argument(
        "file", nargs="?", help="Settings file (default: ~/.config/sdr_panorama/panoramic.json)"
    )
    config_parser.add_argument(
        "--reset", action="store_true", help="Write default settings to the file"
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        # No command specified - show info
        return cmd_info(args)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
