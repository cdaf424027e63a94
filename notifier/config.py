"""
Zero-Configuration management for the Study Buddy notification worker
All settings have sensible defaults - no .env required
"""
import os
from pathlib import Path


class Config:
    """Worker configuration with zero-config defaults"""

    # Application paths (auto-created)
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = BASE_DIR / 'data'
    LOGS_DIR: Path = BASE_DIR / 'logs'
    DB_PATH: Path = DATA_DIR / 'studybuddy.duckdb'

    # Timer intervals (seconds)
    DELIVERY_INTERVAL: int = 60
    SCHEDULING_INTERVAL: int = 15 * 60
    SCHEDULER_MISFIRE_GRACE_TIME: int = 30
    SHUTDOWN_TIMEOUT: float = 30.0

    # Delivery channel: 'log' or 'webhook'
    DELIVERY_CHANNEL: str = 'log'
    WEBHOOK_URL: str = ''
    REQUEST_TIMEOUT: int = 10

    # Reminder windows
    SESSION_REMINDER_LEAD_MINUTES: int = 5
    DAILY_REMINDER_WINDOW_HOURS: tuple = (20, 28)

    # Status HTTP surface (0 disables it)
    STATUS_HOST: str = '127.0.0.1'
    STATUS_PORT: int = 0

    # Logging defaults
    LOG_LEVEL: str = 'INFO'

    def __init__(self):
        """Initialize configuration"""
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load any environment variable overrides (optional)"""
        if os.getenv('NOTIFIER_DB_PATH'):
            self.DB_PATH = Path(os.getenv('NOTIFIER_DB_PATH'))
        if os.getenv('DELIVERY_INTERVAL'):
            self.DELIVERY_INTERVAL = int(os.getenv('DELIVERY_INTERVAL'))
        if os.getenv('SCHEDULING_INTERVAL'):
            self.SCHEDULING_INTERVAL = int(os.getenv('SCHEDULING_INTERVAL'))
        if os.getenv('SCHEDULER_MISFIRE_GRACE_TIME'):
            self.SCHEDULER_MISFIRE_GRACE_TIME = int(os.getenv('SCHEDULER_MISFIRE_GRACE_TIME'))
        if os.getenv('SHUTDOWN_TIMEOUT'):
            self.SHUTDOWN_TIMEOUT = float(os.getenv('SHUTDOWN_TIMEOUT'))
        if os.getenv('DELIVERY_CHANNEL'):
            self.DELIVERY_CHANNEL = os.getenv('DELIVERY_CHANNEL').lower()
        if os.getenv('WEBHOOK_URL'):
            self.WEBHOOK_URL = os.getenv('WEBHOOK_URL')
        if os.getenv('REQUEST_TIMEOUT'):
            self.REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT'))
        if os.getenv('STATUS_PORT'):
            self.STATUS_PORT = int(os.getenv('STATUS_PORT'))
        if os.getenv('LOG_LEVEL'):
            self.LOG_LEVEL = os.getenv('LOG_LEVEL')

    def ensure_dirs(self) -> None:
        """Create data and log directories if missing"""
        self.DB_PATH.parent.mkdir(exist_ok=True, parents=True)
        self.LOGS_DIR.mkdir(exist_ok=True, parents=True)

    def validate(self) -> None:
        """Validate configuration"""
        if self.DELIVERY_INTERVAL <= 0 or self.SCHEDULING_INTERVAL <= 0:
            raise ValueError("Timer intervals must be positive")
        if self.DELIVERY_CHANNEL not in ('log', 'webhook'):
            raise ValueError(f"Unsupported delivery channel: {self.DELIVERY_CHANNEL}")
        if self.DELIVERY_CHANNEL == 'webhook' and not self.WEBHOOK_URL:
            raise ValueError("WEBHOOK_URL is required when DELIVERY_CHANNEL=webhook")


# Create singleton instance
config = Config()
