# Standard library imports
import os
from typing import Final, Optional


class Settings:
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for running the service locally
    against the first attached camera.
    """

    def __init__(self) -> None:
        # Matching
        self.match_threshold: Final[float] = float(os.getenv("FACEGATE_MATCH_THRESHOLD", "80.0"))

        # Persistence
        self.store_path: Final[str] = os.getenv("FACEGATE_STORE_PATH", "data/preferences.json")

        # Capture
        self.capture_dir: Final[str] = os.getenv("FACEGATE_CAPTURE_DIR", "uploads")
        self.camera_index: Final[int] = int(os.getenv("FACEGATE_CAMERA_INDEX", "0"))
        self.camera_warmup_frames: Final[int] = max(
            0, int(os.getenv("FACEGATE_CAMERA_WARMUP_FRAMES", "3"))
        )

        # Detection ("hog" runs on CPU, "cnn" needs a CUDA-enabled dlib)
        self.detection_model: Final[str] = os.getenv("FACEGATE_DETECTION_MODEL", "hog")
        self.upsample_times: Final[int] = max(0, int(os.getenv("FACEGATE_UPSAMPLE_TIMES", "1")))

        # Server
        self.host: Final[str] = os.getenv("FACEGATE_HOST", "0.0.0.0")
        self.port: Final[int] = int(os.getenv("FACEGATE_PORT", "3002"))
        self.log_level: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
