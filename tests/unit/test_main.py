"""Unit tests for the command line entry point."""

import io
from datetime import datetime, timedelta

import pytest
from pathlib import Path
from rich.console import Console

from liveaudio.config import ChunkUnit, ConfigurationError, LiveAudioConfig
from liveaudio.main import Server, build_parser
from liveaudio.models.session import SessionInfo
from liveaudio.storage.file_manager import FileManager


def make_server(argv, config=None):
    # Skip __init__ so no log handlers are installed
    server = Server.__new__(Server)
    server.args = build_parser().parse_args(argv)
    server.config = config
    server.console = Console(file=io.StringIO(), width=200)
    return server


def storage_config(temp_data_dir):
    path = Path(temp_data_dir) / "liveaudio.yaml"
    path.write_text(f"storage:\n  data_directory: {temp_data_dir}\n")
    return LiveAudioConfig(str(path))


def save_info(file_manager, session_id, start_time):
    file_manager.save_session_info(SessionInfo(
        session_id=session_id,
        start_time=start_time,
        duration_seconds=2.0,
        audio_file="recording.wav",
        file_size_bytes=128000,
        sample_rate=16000,
        total_chunks=66,
        sample_count=32000,
    ))


@pytest.mark.unit
class TestMain:

    def test_parser_defaults(self):
        args = build_parser().parse_args([])

        assert args.config is None
        assert args.duration == 10
        assert args.chunk_size is None
        assert args.flush_on_stop is False
        assert args.no_save is False

    def test_unit_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--unit", "seconds"])

    def test_recorder_config_from_arguments(self):
        server = make_server(["--sample-rate", "16000", "--chunk-size", "480",
                              "--unit", "samples", "--flush-on-stop"])

        config = server._recorder_config()

        assert config.sample_rate == 16000
        assert config.chunk_unit is ChunkUnit.SAMPLES
        assert config.chunk_size_in_samples == 480
        assert config.flush_on_stop is True

    def test_arguments_override_yaml(self, temp_data_dir):
        path = Path(temp_data_dir) / "liveaudio.yaml"
        path.write_text("audio:\n  sample_rate: 16000\n  chunk_size: 30\n  chunk_unit: ms\n")
        server = make_server(["--chunk-size", "20"], config=LiveAudioConfig(str(path)))

        config = server._recorder_config()

        assert config.sample_rate == 16000
        assert config.chunk_size_in_samples == 320

    def test_invalid_arguments_rejected(self):
        server = make_server(["--sample-rate", "-5"])

        with pytest.raises(ConfigurationError):
            server._recorder_config()

    def test_list_and_cleanup_flags(self):
        args = build_parser().parse_args(["--list", "--cleanup", "7"])

        assert args.list is True
        assert args.cleanup == 7

    def test_list_saved_recordings(self, temp_data_dir):
        config = storage_config(temp_data_dir)
        file_manager = FileManager(config.get_data_directory())
        save_info(file_manager, "20260301_120000_abcd", datetime(2026, 3, 1, 12, 0, 0))
        server = make_server(["--list"], config=config)

        server.manage_storage()

        output = server.console.file.getvalue()
        assert "20260301_120000_abcd" in output
        assert "2026-03-01 12:00:00" in output
        assert "1 recordings" in output

    def test_cleanup_removes_old_recordings(self, temp_data_dir):
        config = storage_config(temp_data_dir)
        file_manager = FileManager(config.get_data_directory())
        save_info(file_manager, "old", datetime.now() - timedelta(days=10))
        save_info(file_manager, "recent", datetime.now())
        server = make_server(["--cleanup", "7"], config=config)

        server.manage_storage()

        assert [info.session_id for info in file_manager.list_sessions()] == ["recent"]
        assert "Removed 1 recordings" in server.console.file.getvalue()
