"""Entry point — wires Config → ImageSource/CameraController → AnalysisStateMachine."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from src.analysis import AnalysisClient
from src.camera.controller import CameraController
from src.camera.opencv import OpenCVVideoDevice
from src.config import Config
from src.constants import (
    MSG_CLI_DESCRIPTION,
    MSG_NO_INPUT,
    MSG_STARTING,
    PROG_NAME,
)
from src.display import render_error, render_snapshot, render_status
from src.errors import VisionAnalystError
from src.image_source import ImageBuffer, ImageSource
from src.state_machine import AnalysisSnapshot, AnalysisState, AnalysisStateMachine
from src.vision.claude import ClaudeVisionClient
from src.vision.client import VisionClient
from src.vision.gemini import GeminiVisionClient
from src.vision.openai import OpenAIVisionClient

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_vision_client(config: Config) -> VisionClient:
    match config.vision_provider:
        case "openai":
            return OpenAIVisionClient(config.credential, model=config.model)
        case "anthropic":
            return ClaudeVisionClient(config.credential, model=config.model)
        case _:
            return GeminiVisionClient(
                config.credential,
                base_url=config.gemini_base_url,
                model=config.model,
            )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=PROG_NAME, description=MSG_CLI_DESCRIPTION)
    parser.add_argument("image", nargs="?", type=Path, help="image file to analyze")
    parser.add_argument("--camera", action="store_true", help="snap a frame from the camera")
    parser.add_argument(
        "--warmup",
        type=float,
        default=None,
        help="seconds to let the camera settle before snapping",
    )
    return parser.parse_args(argv)


async def acquire(
    args: argparse.Namespace, config: Config, camera: CameraController, console: Console
) -> ImageBuffer:
    match (args.image, args.camera):
        case (Path() as path, False):
            return ImageSource.from_path(path)
        case (None, True):
            await camera.start()
            console.print(render_status(AnalysisSnapshot(AnalysisState.IDLE), camera.is_streaming))
            warmup = config.camera_warmup if args.warmup is None else args.warmup
            await asyncio.sleep(warmup)
            return await camera.snap()
        case _:
            raise ValueError(MSG_NO_INPUT)


async def run(
    args: argparse.Namespace,
    config: Config,
    console: Console,
    camera: Optional[CameraController] = None,
    client: Optional[AnalysisClient] = None,
) -> AnalysisSnapshot:
    client = client or AnalysisClient(build_vision_client(config), provider=config.vision_provider)
    machine = AnalysisStateMachine(client)
    machine.subscribe(lambda snapshot: console.print(render_status(snapshot)))

    async with camera or CameraController(OpenCVVideoDevice(config.camera_index)) as cam:
        try:
            image = await acquire(args, config, cam, console)
        except VisionAnalystError as exc:
            console.print(render_error(str(exc)))
            return machine.snapshot

    try:
        snapshot = await machine.image_acquired(image)
    finally:
        machine.close()

    match snapshot:
        case AnalysisSnapshot(error=str() as error):
            console.print(render_error(error))
        case _:
            pass
    card = render_snapshot(snapshot)
    if card is not None:
        console.print(card)
    return snapshot


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger.info(MSG_STARTING, config.vision_provider)

    console = Console()
    try:
        snapshot = asyncio.run(run(args, config, console))
    except ValueError as exc:
        console.print(render_error(str(exc)))
        return 2
    return 0 if snapshot.state is AnalysisState.COMPLETE else 1


if __name__ == "__main__":
    sys.exit(main())
