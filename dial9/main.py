"""Main application entry point for Dial9 call history."""

import os
import sys
import asyncio
import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from dial9.api.client import RecordingApiClient
from dial9.models.credentials import Credentials
from dial9.services.history_service import CallHistoryService
from dial9.services.playback import PlaybackController
from dial9.storage.catalog import RecordingCatalog
from dial9.storage.credentials import CredentialManager, KeyringSecretStore
from dial9.storage.export import AudioExporter
from dial9.ui.recordings_view import RecordingsView

from .config import Dial9Config

logger = logging.getLogger(__name__)

TOKEN_ENV = "DIAL9_AUTH_TOKEN"
SECRET_ENV = "DIAL9_AUTH_SECRET"


class CallHistoryApp:
    """Wires configuration, credentials and services for one CLI invocation."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = Dial9Config(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.view = RecordingsView()
        self.catalog = RecordingCatalog()
        self.client = RecordingApiClient(
            base_url=self.config.get_api_base_url(),
            timeout_seconds=self.config.get('api.timeout_seconds', 30),
        )
        self.credential_manager = CredentialManager(
            KeyringSecretStore(self.config.get('credentials.service_name', 'com.dial9.callhistory')),
            save_details=self.config.get('credentials.save_details', False),
        )

    def resolve_credentials(self, token: Optional[str], secret: Optional[str],
                            save_details: Optional[bool]) -> Credentials:
        """Pick credentials from flags, then environment, then the keyring."""
        token = token or os.environ.get(TOKEN_ENV)
        secret = secret or os.environ.get(SECRET_ENV)

        if token and secret:
            credentials = Credentials(auth_token=token, auth_secret=secret)
            if save_details is not None:
                self.credential_manager.set_save_details(save_details, credentials)
            else:
                self.credential_manager.credentials_changed(credentials)
            return credentials

        if save_details is not None:
            self.credential_manager.set_save_details(save_details)

        saved = self.credential_manager.load()
        if saved is None:
            raise ValueError(
                f"Credentials required: pass --token/--secret or set {TOKEN_ENV}/{SECRET_ENV}")
        return saved

    def history_service(self, credentials: Credentials) -> CallHistoryService:
        return CallHistoryService(
            client=self.client,
            catalog=self.catalog,
            credentials=credentials,
            exporter=AudioExporter(self.config.get_export_directory()),
        )

    async def search(self, credentials: Credentials, day: date) -> bool:
        service = self.history_service(credentials)
        result = await service.search_day(day)
        if result["success"] and result["count"]:
            self.view.show_recordings(self.catalog)
        self.view.show_status(result["message"], result["success"])
        return result["success"]

    async def download(self, credentials: Credentials, recording_id: int) -> bool:
        service = self.history_service(credentials)
        result = await service.download(recording_id)
        self.view.show_status(result["message"], result["success"])
        return result["success"]

    async def delete(self, credentials: Credentials, recording_id: int) -> bool:
        service = self.history_service(credentials)
        result = await service.delete(recording_id)
        self.view.show_status(result["message"], result["success"])
        return result["success"]

    async def play(self, credentials: Credentials, recording_id: int, day: Optional[date]) -> bool:
        # Imported here so the other commands work without an audio device
        from dial9.audio.output import PyAudioPlayer

        record = None
        if day is not None:
            await self.history_service(credentials).search_day(day)
            record = self.catalog.find(recording_id)

        chunk_frames = self.config.get('playback.chunk_frames', 1024)
        controller = PlaybackController(
            client=self.client,
            credentials=credentials,
            player_factory=lambda: PyAudioPlayer(chunk_frames=chunk_frames),
            progress_interval=self.config.get('playback.progress_interval_seconds', 0.1),
            topic=self.config.get('playback.topic', 'playback.state'),
        )
        try:
            await controller.play(recording_id)
            name = record.source_name if record and record.source_name else "Unknown"
            self.view.show_status(f"Playing recording from: {name}")
            await self.view.follow_playback(controller, record)
            self.view.show_status("Playback stopped.")
            return True
        finally:
            controller.dispose()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'logs/dial9.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set up handlers
    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("=" * 50)
    logger.info("Dial9 call history starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dial9",
        description="Dial9 call history - search, download, play and delete call recordings",
    )
    parser.add_argument("--config", type=str, help="Path to configuration YAML file")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )
    parser.add_argument("--token", type=str, help=f"X-Auth-Token (default: ${TOKEN_ENV})")
    parser.add_argument("--secret", type=str, help=f"X-Auth-Secret (default: ${SECRET_ENV})")
    save = parser.add_mutually_exclusive_group()
    save.add_argument("--save-details", dest="save_details", action="store_true", default=None,
                      help="Remember credentials in the system keyring")
    save.add_argument("--forget-details", dest="save_details", action="store_false",
                      help="Remove remembered credentials from the system keyring")
    parser.add_argument("--version", action="version", version="dial9 0.1.0")

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="List recordings for one day")
    search.add_argument("--date", type=date.fromisoformat, default=date.today(),
                        help="Day to search, YYYY-MM-DD (default: today)")

    download = commands.add_parser("download", help="Save a recording as .wav")
    download.add_argument("recording_id", type=int)

    delete = commands.add_parser("delete", help="Permanently delete a recording")
    delete.add_argument("recording_id", type=int)
    delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    play = commands.add_parser("play", help="Play a recording on the default output device")
    play.add_argument("recording_id", type=int)
    play.add_argument("--date", type=date.fromisoformat,
                      help="Day of the call, used to show caller and duration")

    return parser


async def run_command(app: CallHistoryApp, args: argparse.Namespace, credentials: Credentials) -> bool:
    if args.command == "search":
        return await app.search(credentials, args.date)
    if args.command == "download":
        return await app.download(credentials, args.recording_id)
    if args.command == "delete":
        return await app.delete(credentials, args.recording_id)
    if args.command == "play":
        return await app.play(credentials, args.recording_id, args.date)
    raise ValueError(f"Unknown command: {args.command}")


def main() -> None:
    """Main entry point for the dial9 command."""
    args = build_parser().parse_args()

    try:
        app = CallHistoryApp(args.config, args.log_level)
        credentials = app.resolve_credentials(args.token, args.secret, args.save_details)

        if args.command == "delete" and not args.yes:
            answer = input(f"Permanently delete recording {args.recording_id}? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Cancelled.")
                return

        success = asyncio.run(run_command(app, args, credentials))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
