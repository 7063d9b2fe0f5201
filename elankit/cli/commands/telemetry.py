"""
Telemetry command implementation.

Enables or disables local telemetry logging.
"""

from elankit.cli.utils import load_cfg


def run(args) -> int:
    cfg = load_cfg(args)
    if args.state is None:
        print("enabled" if cfg.telemetry_enabled() else "disabled")
        return 0
    cfg.set_telemetry(args.state == "enable")
    return 0
