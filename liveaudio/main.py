"""Command line entry point for liveaudio."""

import sys
import time
import argparse
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from liveaudio import __version__
from liveaudio.config import ConfigurationError, LiveAudioConfig, RecorderConfig
from liveaudio.models.session import SessionInfo
from liveaudio.services.recorder import LiveAudioRecorder
from liveaudio.storage.file_manager import FileManager

logger = logging.getLogger(__name__)


class Server:
    """Records from the default microphone for a fixed duration."""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.config: Optional[LiveAudioConfig] = LiveAudioConfig(args.config) if args.config else None
        log_level = args.log_level or (self.config.get('logging.level', 'INFO') if self.config else 'INFO')
        setup_logging(self.config, log_level)

        self.console = Console()
        self.recorder: Optional[LiveAudioRecorder] = None
        self.file_manager: Optional[FileManager] = None
        self.chunks_received = 0
        self.bytes_received = 0

    def _data_directory(self) -> str:
        return self.config.get_data_directory() if self.config else str(Path("data").absolute())

    def _recorder_config(self) -> RecorderConfig:
        """Recorder settings from the YAML audio section, overridden by CLI flags."""
        base = self.config.get_recorder_config() if self.config else RecorderConfig()

        overrides = {}
        if self.args.sample_rate is not None:
            overrides['sample_rate'] = self.args.sample_rate
        if self.args.chunk_size is not None:
            overrides['chunk_size'] = self.args.chunk_size
        if self.args.unit is not None:
            overrides['chunk_unit'] = self.args.unit
        if self.args.flush_on_stop:
            overrides['flush_on_stop'] = True

        return replace(base, **overrides) if overrides else base

    def init(self) -> None:
        logger.info("Initializing recorder...")
        recorder_config = self._recorder_config()
        logger.info(f"Audio settings: {recorder_config.sample_rate}Hz, "
                    f"{recorder_config.chunk_size_in_samples} samples/chunk, "
                    f"streaming={recorder_config.streaming_enabled}")

        self.recorder = LiveAudioRecorder(config=recorder_config)
        self.recorder.listen(self._on_chunk)
        self.recorder.on_status(self._on_status)

        if not self.args.no_save:
            self.file_manager = FileManager(self._data_directory())

    def _on_chunk(self, payload: bytes) -> None:
        self.chunks_received += 1
        self.bytes_received += len(payload)

    def _on_status(self, event) -> None:
        if event.status == "error":
            self.console.print(f"❌ {event.message}", style="red")

    def run(self, duration: int) -> None:
        started_at = datetime.now()
        if not self.recorder.start_recording():
            raise RuntimeError("Recording could not be started")

        with self.console.status("Recording...") as status:
            end_time = time.time() + duration
            while time.time() < end_time:
                stats = self.recorder.get_recording_stats()
                status.update(f"🎤 Recording {stats.duration_seconds:.1f}s, "
                              f"{stats.total_chunks} chunks, peak {stats.peak_level:.2f}")
                time.sleep(0.2)

        self.recorder.stop_recording()
        self.recorder.flush(timeout=2.0)
        self._report(started_at)

    def _report(self, started_at: datetime) -> None:
        stats = self.recorder.get_recording_stats()
        aggregate = self.recorder.read() or b''

        table = Table(title="Recording summary")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Duration", f"{stats.duration_seconds:.2f}s")
        table.add_row("Sample rate", f"{stats.sample_rate}Hz")
        table.add_row("Chunk size", f"{stats.chunk_size} samples")
        table.add_row("Chunks emitted", str(stats.total_chunks))
        table.add_row("Chunks streamed", str(self.chunks_received))
        table.add_row("Samples captured", str(stats.total_samples))
        table.add_row("Aggregate size", f"{len(aggregate)} bytes")
        table.add_row("Peak level", f"{stats.peak_level:.3f}")

        if self.file_manager:
            session_id = self.file_manager.create_session_directory()
            audio_file = self.file_manager.save_recording(aggregate, session_id, stats.sample_rate)
            self.file_manager.save_session_info(SessionInfo(
                session_id=session_id,
                start_time=started_at,
                duration_seconds=stats.duration_seconds,
                audio_file=audio_file,
                file_size_bytes=Path(audio_file).stat().st_size,
                sample_rate=stats.sample_rate,
                total_chunks=stats.total_chunks,
                sample_count=len(aggregate) // 4,
            ))
            table.add_row("Saved to", audio_file)

        self.console.print(table)

    def manage_storage(self) -> None:
        """Handle --cleanup and --list without recording."""
        file_manager = FileManager(self._data_directory())

        if self.args.cleanup is not None:
            removed = file_manager.cleanup_old_sessions(self.args.cleanup)
            self.console.print(f"🧹 Removed {removed} recordings older than {self.args.cleanup} days")

        if self.args.list:
            table = Table(title="Saved recordings")
            table.add_column("Session")
            table.add_column("Started")
            table.add_column("Duration", justify="right")
            table.add_column("Rate", justify="right")
            table.add_column("Chunks", justify="right")
            table.add_column("Samples", justify="right")
            for info in file_manager.list_sessions():
                table.add_row(
                    info.session_id,
                    info.start_time.strftime("%Y-%m-%d %H:%M:%S"),
                    f"{info.duration_seconds:.1f}s",
                    f"{info.sample_rate}Hz",
                    str(info.total_chunks),
                    str(info.sample_count),
                )
            self.console.print(table)

            stats = file_manager.get_storage_stats()
            self.console.print(f"{stats['session_count']} recordings, "
                               f"{stats['recorded_seconds']}s of audio, "
                               f"{stats['total_size_mb']} MB in {stats['data_directory']}")

    def cleanup(self) -> None:
        if self.recorder:
            self.recorder.shutdown()


def setup_logging(config: Optional[LiveAudioConfig], level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    if config:
        log_file_path = config.get('logging.file_path', 'data/logs/liveaudio.log')
        console_output = config.get('logging.console_output', True)
    else:
        log_file_path = 'data/logs/liveaudio.log'
        console_output = True

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("="*50)
    logger.info("liveaudio starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="liveaudio - record the microphone as fixed-size pcm_f32le chunks"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Recording duration in seconds (default: 10)"
    )

    parser.add_argument(
        "--sample-rate",
        type=int,
        help="Capture sample rate in Hz (overrides config)"
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        help="Streamed chunk size (overrides config); omit to disable streaming"
    )

    parser.add_argument(
        "--unit",
        choices=["ms", "samples"],
        help="Unit of --chunk-size (default: ms)"
    )

    parser.add_argument(
        "--flush-on-stop",
        action="store_true",
        help="Keep the final partial chunk in the saved recording"
    )

    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the recording to the data directory"
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List saved recordings and exit"
    )

    parser.add_argument(
        "--cleanup",
        type=int,
        metavar="DAYS",
        help="Delete saved recordings older than DAYS and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"liveaudio v{__version__}"
    )

    return parser


def main() -> None:
    """Main entry point for the liveaudio command."""
    args = build_parser().parse_args()

    server = None
    try:
        server = Server(args)
        if args.list or args.cleanup is not None:
            server.manage_storage()
        else:
            server.init()
            server.run(args.duration)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        if server:
            server.cleanup()


if __name__ == "__main__":
    main()
