"""Main Application entry point.

Loads configuration, initializes logging, wires capture, recognition,
localization and input into a NavigationController, and runs one path.

Usage:
  maptracker run path.json [--config PATH] [--log-level DEBUG] [--dry-run]
  maptracker locate MAP_NAME [--config PATH]
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config.navigation import WORK_H, WORK_W
from .controllers.localization import LocalizationService
from .core.config import ConfigManager
from .core.errors import LocalizationError, ParamValidationError
from .core.logging_setup import get_artifacts_dir, setup_logging
from .io.capture import ScreenCapture
from .navigation import ActionWrapper, MessageTemplates, NavigationController, Notifier, parse_params
from .vision.recognizer import MapRecognizer

EXIT_OK = 0
EXIT_NAV_FAILED = 1
EXIT_BAD_PARAMS = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="maptracker", description="Map localization and waypoint navigation")
    parser.add_argument("--config", help="path to config.ini (default: per-user config)")
    parser.add_argument("--log-level", help="override DEFAULT.log_level")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="navigate along the path in a JSON parameter file")
    run.add_argument("params", help="JSON file with map_name, path and optional thresholds ('-' for stdin)")
    run.add_argument("--dry-run", action="store_true", help="log input commands instead of sending them")

    locate = sub.add_parser("locate", help="run one localization and print the pose")
    locate.add_argument("map_name")
    return parser


def read_params_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_capture(config_manager: ConfigManager) -> ScreenCapture:
    region = config_manager.get_tuple("capture_region")
    if len(region) == 4:
        return ScreenCapture({"left": region[0], "top": region[1], "width": region[2], "height": region[3]})
    return ScreenCapture()


def build_localizer(config_manager: ConfigManager, capture: ScreenCapture) -> LocalizationService:
    maps_dir = config_manager.get("maps_dir")
    pointer = config_manager.get("pointer_template")
    if not maps_dir or not pointer:
        raise FileNotFoundError("maps_dir and pointer_template must be set in config.ini")
    recognizer = MapRecognizer.from_files(
        maps_dir,
        pointer,
        minimap_center=config_manager.get_tuple("minimap_center", (108, 110)),
        minimap_radius=config_manager.get_int("minimap_radius", 50),
        pointer_radius=config_manager.get_int("pointer_radius", 10),
        map_scale=config_manager.get_float("map_scale", 1.0),
        search_radius=config_manager.get_int("search_radius", 160),
    )
    return LocalizationService(capture, recognizer, precision=config_manager.get_float("precision", 0.6))


def build_input(dry_run: bool):
    if dry_run:
        from .io.dry_run import DryRunInput
        return DryRunInput()
    from .io.controls import InputController
    return InputController()


def save_failed_frame(config_manager: ConfigManager, capture: ScreenCapture) -> Optional[Path]:
    """Write the last captured frame under the session artifacts directory."""
    if capture.last_frame is None:
        return None
    import cv2

    out = get_artifacts_dir(config_manager) / datetime.now().strftime("locate-fail-%H%M%S.png")
    cv2.imwrite(str(out), capture.last_frame)
    return out


def cmd_locate(args, config_manager: ConfigManager) -> int:
    logger = logging.getLogger(__name__)
    capture = build_capture(config_manager)
    localizer = build_localizer(config_manager, capture)
    try:
        pose = localizer.locate(args.map_name)
    except LocalizationError as e:
        logger.error("Localization failed: %s", e)
        saved = save_failed_frame(config_manager, capture)
        if saved is not None:
            logger.info("Saved frame to %s", saved)
        return EXIT_NAV_FAILED
    finally:
        capture.close()
    print(f"{args.map_name}: x={pose.x} y={pose.y} rotation={pose.rotation}")
    return EXIT_OK


def cmd_run(args, config_manager: ConfigManager) -> int:
    logger = logging.getLogger(__name__)
    try:
        params = parse_params(read_params_text(args.params))
    except ParamValidationError as e:
        logger.error("Invalid parameters: %s", e)
        return EXIT_BAD_PARAMS

    dry_run = args.dry_run or config_manager.get_bool("dry_run")
    capture = build_capture(config_manager)
    localizer = build_localizer(config_manager, capture)
    work = config_manager.get_tuple("work_resolution", (WORK_W, WORK_H))
    actions = ActionWrapper(build_input(dry_run), work_size=work[:2] if len(work) >= 2 else (WORK_W, WORK_H))
    notifier = Notifier(
        sink=lambda text: print(text, flush=True),
        templates=MessageTemplates.from_mapping(config_manager.messages()),
    )

    stop_event = threading.Event()

    def _on_sigint(signum, frame):
        logger.warning("Interrupt received, stopping after the current cycle")
        stop_event.set()

    signal.signal(signal.SIGINT, _on_sigint)

    controller = NavigationController(
        localizer,
        actions,
        notifier=notifier,
        stop_event=stop_event,
        infer_interval_ms=config_manager.get_int("infer_interval_ms", 200),
    )
    try:
        result = controller.run(params)
    finally:
        capture.close()
    logger.info(
        "Run ended status=%s reached=%d/%d %s",
        result.status.value, result.reached, result.total, result.reason,
    )
    return EXIT_OK if result.ok else EXIT_NAV_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, set up config and logging, dispatch the command."""
    args = build_parser().parse_args(argv)
    config_manager = ConfigManager(args.config)
    setup_logging(config_manager, level=args.log_level)

    def _excepthook(exc_type, exc, tb):
        logging.getLogger(__name__).error("Unhandled exception:", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _excepthook

    try:
        if args.command == "locate":
            return cmd_locate(args, config_manager)
        return cmd_run(args, config_manager)
    except FileNotFoundError as e:
        logging.getLogger(__name__).error("Missing recognition assets: %s", e)
        return EXIT_NAV_FAILED


if __name__ == "__main__":
    sys.exit(main())
