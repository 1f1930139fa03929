"""Entry point: wires Config → SpeechRecognitionService → HealthTracker → Dictation."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pushtalk.config import Config
from pushtalk.dictation import Dictation
from pushtalk.health import HealthTracker, Trigger
from pushtalk.speech_service import SpeechRecognitionService
from pushtalk.transcription.models import PartialResult, ProviderId

console = Console()


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True, console=Console(stderr=True)))


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pushtalk", description="Push-to-talk transcription")
    parser.add_argument(
        "--provider",
        choices=[p.value for p in ProviderId],
        help="override PUSHTALK_PROVIDER",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    transcribe = commands.add_parser("transcribe", help="transcribe a recorded audio file")
    transcribe.add_argument("file", type=Path)
    transcribe.add_argument("--no-clipboard", action="store_true")

    commands.add_parser("test", help="check that the active provider is reachable")
    return parser.parse_args(argv)


def _echo_partial(partial: PartialResult) -> None:
    console.print(f"[dim]… {escape(partial.text)}[/dim]")


async def _run(args: argparse.Namespace, config: Config) -> int:
    service = SpeechRecognitionService()
    service.load(config)
    if args.provider:
        service.set_provider(args.provider)
    tracker = HealthTracker(service)

    match args.command:
        case "test":
            state = await tracker.reevaluate(Trigger.STARTUP)
            console.print(f"{service.display_name}: {state.value}")
            if tracker.last_error:
                console.print(f"[red]{escape(tracker.last_error)}[/red]")
            return 0 if tracker.is_ready else 1
        case "transcribe":
            audio = args.file.read_bytes()
            dictation = Dictation(service, tracker)
            result = await dictation.handle_recording(
                audio,
                on_result=_echo_partial,
                to_clipboard=not args.no_clipboard,
            )
            match result.success:
                case True:
                    console.print(result.text or "", markup=False)
                    return 0
                case False:
                    console.print(f"[red]{escape(result.error or '')}[/red]")
                    return 1
        case _:
            return 2


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(argv)
    config = Config.from_env()
    _setup_logging(config.log_level)
    sys.exit(asyncio.run(_run(args, config)))


if __name__ == "__main__":
    main()
