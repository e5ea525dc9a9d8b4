"""File management module for saved recordings and their session metadata."""

import json
import logging
import shutil
import random
import string
from pathlib import Path
from datetime import datetime, timedelta
from typing import Dict, Any, Optional, List
from dataclasses import asdict

import numpy as np
from scipy.io import wavfile

from ..bridge.protocol import decode_samples
from ..models.session import SessionInfo


logger = logging.getLogger(__name__)

SESSION_INFO_FILE = "session_info.json"


class FileManager:
    """Stores each finalized recording as a float WAV plus a session info JSON.

    Layout: ``<data_dir>/sessions/<session_id>/{recording_*.wav, session_info.json}``.
    """

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing recordings
        """
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def get_session_path(self, session_id: str) -> Path:
        return self.sessions_dir / session_id

    def create_session_directory(self) -> str:
        """Create new session directory with timestamp and random suffix.

        Returns:
            Session ID (YYYYMMDD_HHMMSS_xxxx)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        session_id = f"{timestamp}_{random_suffix}"
        self.get_session_path(session_id).mkdir(exist_ok=True)

        logger.info(f"Created session directory: {session_id}")
        return session_id

    def save_recording(self, aggregate: bytes, session_id: str, sample_rate: int,
                       filename: Optional[str] = None) -> str:
        """Write a pcm_f32le aggregate as a 32-bit float WAV file.

        Args:
            aggregate: Finalized recording bytes
            session_id: Session identifier
            sample_rate: Sample rate of the recording in Hz
            filename: Optional custom filename

        Returns:
            Full path to saved audio file
        """
        if filename is None:
            filename = f"recording_{datetime.now().strftime('%H%M%S')}.wav"
        elif not filename.endswith('.wav'):
            filename += '.wav'

        session_path = self.get_session_path(session_id)
        session_path.mkdir(exist_ok=True)
        audio_file_path = session_path / filename

        samples = decode_samples(aggregate).astype(np.float32)
        try:
            wavfile.write(str(audio_file_path), sample_rate, samples)
        except OSError as e:
            logger.error(f"Error saving recording: {e}")
            raise

        logger.info(f"Recording saved: {audio_file_path} "
                    f"({samples.size} samples, {samples.size / sample_rate:.2f}s)")
        return str(audio_file_path)

    def save_session_info(self, session_info: SessionInfo) -> str:
        """Save session information next to its recording.

        Returns:
            Path to saved session info file
        """
        session_path = self.get_session_path(session_info.session_id)
        session_path.mkdir(exist_ok=True)
        info_file = session_path / SESSION_INFO_FILE

        info_dict = asdict(session_info)
        info_dict['start_time'] = session_info.start_time.isoformat()

        try:
            with open(info_file, 'w') as f:
                json.dump(info_dict, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving session info: {e}")
            raise

        logger.info(f"Session info saved: {info_file}")
        return str(info_file)

    def load_session_info(self, session_id: str) -> Optional[SessionInfo]:
        """Load session information, or None if missing or unreadable."""
        info_file = self.get_session_path(session_id) / SESSION_INFO_FILE
        if not info_file.exists():
            logger.debug(f"No session info for {session_id}")
            return None

        try:
            with open(info_file, 'r') as f:
                data = json.load(f)
            data['start_time'] = datetime.fromisoformat(data['start_time'])
            return SessionInfo(**data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading session info for {session_id}: {e}")
            return None

    def list_sessions(self) -> List[SessionInfo]:
        """All saved recordings with readable info, oldest first."""
        sessions = []
        for path in self.sessions_dir.iterdir():
            if path.is_dir():
                info = self.load_session_info(path.name)
                if info is not None:
                    sessions.append(info)

        sessions.sort(key=lambda info: info.start_time)
        logger.debug(f"Found {len(sessions)} saved recordings")
        return sessions

    def cleanup_old_sessions(self, max_age_days: int = 30) -> int:
        """Delete recordings started more than ``max_age_days`` ago.

        Directories without readable session info (interrupted saves) are
        aged by their modification time.

        Returns:
            Number of session directories removed
        """
        cutoff = datetime.now() - timedelta(days=max_age_days)
        removed = 0

        for path in self.sessions_dir.iterdir():
            if not path.is_dir():
                continue
            info = self.load_session_info(path.name)
            started = info.start_time if info else datetime.fromtimestamp(path.stat().st_mtime)
            if started < cutoff:
                shutil.rmtree(path)
                removed += 1
                logger.info(f"Removed old recording: {path.name}")

        logger.info(f"Cleanup removed {removed} recordings older than {max_age_days} days")
        return removed

    def get_storage_stats(self) -> Dict[str, Any]:
        """Disk usage and recorded totals across saved sessions."""
        total_size = sum(
            file_path.stat().st_size
            for file_path in self.sessions_dir.rglob("*") if file_path.is_file()
        )
        sessions = self.list_sessions()

        return {
            "session_count": len(sessions),
            "recorded_seconds": round(sum(info.duration_seconds for info in sessions), 2),
            "total_samples": sum(info.sample_count for info in sessions),
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "data_directory": str(self.data_dir)
        }
