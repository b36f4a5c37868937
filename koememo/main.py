"""Main application entry point for koememo."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web
from rich.console import Console

from . import __version__
from .api.server import create_app
from .audio.formats import guess_mime_type
from .config import KoememoConfig
from .exceptions import ConfigurationError, KoememoError
from .models.audio import AudioArtifact
from .models.transcription import TextSlot
from .services.builder import create_memo_session
from .storage.exporter import MemoExporter
from .transcription.factory import create_transcription_backend
from .ui.memo_screen import MemoScreen, SLOT_KEYS

logger = logging.getLogger(__name__)


class Application:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = KoememoConfig(config_path)
        # Set up logging (command line overrides config)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()

    def _exporter(self, output_dir: Optional[str]) -> MemoExporter:
        return MemoExporter(output_dir or self.config.get_output_directory())

    def record(self, duration: Optional[float], output_dir: Optional[str],
               copy_slot: Optional[TextSlot], interactive: bool = True) -> int:
        session = create_memo_session(self.config, with_microphone=True)
        screen = MemoScreen(session, exporter=self._exporter(output_dir), console=self.console)
        try:
            asyncio.run(self._record(screen, duration))
            if copy_slot is not None:
                screen.copy(copy_slot)
            if interactive and sys.stdin.isatty():
                screen.interact()
        finally:
            screen.close()
            session.close()
        return 0 if session.texts.raw else 1

    async def _record(self, screen: MemoScreen, duration: Optional[float]) -> None:
        try:
            await screen.record(duration)
        finally:
            await screen.session.backend.cleanup()

    def transcribe(self, file_path: str, mime_type: Optional[str], output_dir: Optional[str]) -> int:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        artifact = AudioArtifact(data=path.read_bytes(), mime_type=mime_type or guess_mime_type(str(path)))
        logger.info(f"Transcribing {path} as {artifact.mime_type} ({artifact.size} bytes)")

        session = create_memo_session(self.config, with_microphone=False)
        exporter = self._exporter(output_dir) if output_dir else None
        screen = MemoScreen(session, exporter=exporter, console=self.console)
        try:
            asyncio.run(self._transcribe(screen, artifact))
            if exporter is not None and session.texts.raw:
                screen.save(include_audio=False)
        finally:
            screen.close()
        return 0 if session.texts.raw else 1

    async def _transcribe(self, screen: MemoScreen, artifact: AudioArtifact) -> None:
        try:
            await screen.transcribe(artifact)
        finally:
            await screen.session.backend.cleanup()

    def serve(self, host: Optional[str], port: Optional[int]) -> int:
        host = host or self.config.get('server.host', '127.0.0.1')
        port = port or self.config.get('server.port', 8080)
        backend = create_transcription_backend(self.config)
        logger.info(f"Serving transcription API on {host}:{port} ({backend.provider})")
        web.run_app(create_app(backend), host=host, port=port, print=self.console.print)
        return 0


def setup_logging(config: KoememoConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/koememo.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("koememo starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="koememo",
        description="koememo - voice memos transcribed, cleaned of fillers and corrected",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for koememo.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"koememo v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    record = subparsers.add_parser("record", help="Record a memo from the microphone")
    record.add_argument("--duration", type=float,
                        help="Stop after this many seconds (default: press Enter to stop)")
    record.add_argument("--output-dir", type=str, help="Directory for saved memos")
    record.add_argument("--copy", choices=sorted(SLOT_KEYS), dest="copy_slot",
                        help="Copy a text to the clipboard when done (1=transcript 2=fillers removed 3=corrected)")
    record.add_argument("--no-interactive", action="store_true",
                        help="Exit after processing instead of offering copy/edit/save")

    transcribe = subparsers.add_parser("transcribe", help="Process an existing audio file")
    transcribe.add_argument("file", type=str, help="Audio file to transcribe")
    transcribe.add_argument("--mime-type", type=str, help="Audio MIME type (default: guessed from extension)")
    transcribe.add_argument("--output-dir", type=str, help="Save the texts to this directory")

    serve = subparsers.add_parser("serve", help="Run the HTTP transcription API")
    serve.add_argument("--host", type=str, help="Bind address (default: server.host)")
    serve.add_argument("--port", type=int, help="Port (default: server.port)")

    return parser


def main(argv=None) -> None:
    """Main entry point for koememo."""
    args = build_parser().parse_args(argv)

    try:
        app = Application(args.config, args.log_level)
        if args.command == "record":
            copy_slot = SLOT_KEYS[args.copy_slot] if args.copy_slot else None
            exit_code = app.record(args.duration, args.output_dir, copy_slot,
                                   interactive=not args.no_interactive)
        elif args.command == "transcribe":
            exit_code = app.transcribe(args.file, args.mime_type, args.output_dir)
        else:
            exit_code = app.serve(args.host, args.port)
    except KeyboardInterrupt:
        print("\nGoodbye!")
        exit_code = 130
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        logging.error(f"Configuration error: {e}")
        exit_code = 2
    except KoememoError as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.error(f"Application error: {e}")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
