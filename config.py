"""
StadiumGen Configuration Module

Centralized configuration management for the StadiumGen application.
Loads settings from environment variables with sensible defaults.

Usage:
    from config import config
    export_dir = config.EXPORT_DIR
    log_level = config.LOG_LEVEL
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

VALID_STADIUM_TYPES = ['football', 'cricket']
VALID_ROOF_TYPES = ['none', 'overall', 'individual']


class Config:
    """
    Configuration class for StadiumGen application.

    Attributes are loaded from environment variables with fallback defaults.
    """

    # =============================================================================
    # Application Defaults
    # =============================================================================

    @property
    def DEFAULT_STADIUM_TYPE(self) -> str:
        """Stadium type used when a parameter set does not name one"""
        value = os.getenv('DEFAULT_STADIUM_TYPE', 'football').lower()
        return value if value in VALID_STADIUM_TYPES else 'football'

    @property
    def DEFAULT_ROOF_TYPE(self) -> str:
        """Roof type used when a parameter set does not name one"""
        value = os.getenv('DEFAULT_ROOF_TYPE', 'individual').lower()
        return value if value in VALID_ROOF_TYPES else 'individual'

    # =============================================================================
    # File Paths
    # =============================================================================

    @property
    def PROJECT_ROOT(self) -> Path:
        """Project root directory"""
        return Path(__file__).parent

    @property
    def EXPORT_DIR(self) -> Path:
        """Default directory for GLB exports and snapshots"""
        export_dir = Path(os.getenv('EXPORT_DIR', 'exports'))
        if not export_dir.is_absolute():
            export_dir = self.PROJECT_ROOT / export_dir
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir

    @property
    def SAVE_DIR(self) -> Path:
        """Default directory for JSON parameter saves"""
        save_dir = Path(os.getenv('SAVE_DIR', 'saves'))
        if not save_dir.is_absolute():
            save_dir = self.PROJECT_ROOT / save_dir
        save_dir.mkdir(parents=True, exist_ok=True)
        return save_dir

    # =============================================================================
    # Rendering
    # =============================================================================

    @property
    def SNAPSHOT_WIDTH(self) -> int:
        """Off-screen snapshot width in pixels"""
        return int(os.getenv('SNAPSHOT_WIDTH', '1600'))

    @property
    def SNAPSHOT_HEIGHT(self) -> int:
        """Off-screen snapshot height in pixels"""
        return int(os.getenv('SNAPSHOT_HEIGHT', '1000'))

    # =============================================================================
    # Debug/Development
    # =============================================================================

    @property
    def DEBUG(self) -> bool:
        """Enable debug mode"""
        return os.getenv('DEBUG', 'False').lower() in ('true', '1', 'yes')

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"""
        level = os.getenv('LOG_LEVEL', 'INFO').upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        return level if level in valid_levels else 'INFO'

    @property
    def VERBOSE(self) -> bool:
        """Enable verbose output during generation"""
        return os.getenv('VERBOSE', 'False').lower() in ('true', '1', 'yes')

    # =============================================================================
    # Helper Methods
    # =============================================================================

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of warning/error messages (empty if all OK)
        """
        issues = []

        stadium_type = os.getenv('DEFAULT_STADIUM_TYPE')
        if stadium_type and stadium_type.lower() not in VALID_STADIUM_TYPES:
            issues.append(f"Unknown DEFAULT_STADIUM_TYPE '{stadium_type}', using football")

        roof_type = os.getenv('DEFAULT_ROOF_TYPE')
        if roof_type and roof_type.lower() not in VALID_ROOF_TYPES:
            issues.append(f"Unknown DEFAULT_ROOF_TYPE '{roof_type}', using individual")

        try:
            if self.SNAPSHOT_WIDTH <= 0 or self.SNAPSHOT_HEIGHT <= 0:
                issues.append("Snapshot dimensions must be positive integers")
        except ValueError:
            issues.append("Snapshot dimensions must be integers")

        return issues

    def get_summary(self) -> str:
        """
        Get human-readable configuration summary.

        Returns:
            Formatted configuration summary string
        """
        lines = [
            "StadiumGen Configuration:",
            f"  Project Root: {self.PROJECT_ROOT}",
            f"  Export Dir: {self.EXPORT_DIR}",
            f"  Save Dir: {self.SAVE_DIR}",
            "",
            "Defaults:",
            f"  Stadium Type: {self.DEFAULT_STADIUM_TYPE}",
            f"  Roof Type: {self.DEFAULT_ROOF_TYPE}",
            "",
            "Rendering:",
            f"  Snapshot size: {self.SNAPSHOT_WIDTH}x{self.SNAPSHOT_HEIGHT}",
            "",
            "Debug:",
            f"  Debug mode: {self.DEBUG}",
            f"  Log level: {self.LOG_LEVEL}",
            f"  Verbose: {self.VERBOSE}",
        ]
        return "\n".join(lines)


# Global config instance
config = Config()


def configure_logging(level: str | None = None):
    """
    Configure root logging once at application startup.
    DEBUG mode forces the DEBUG level; VERBOSE raises WARNING/ERROR levels to INFO.
    """
    if level is None:
        level = 'DEBUG' if config.DEBUG else config.LOG_LEVEL
        if config.VERBOSE and logging.getLevelName(level) > logging.INFO:
            level = 'INFO'
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Convenience function for validation on import
def check_config():
    """
    Check configuration and log warnings.
    Call this at application startup.
    """
    issues = config.validate()
    logger = logging.getLogger(__name__)
    for issue in issues:
        logger.warning("Configuration: %s", issue)


if __name__ == "__main__":
    # Allow running as script to check configuration
    print(config.get_summary())
    print()

    issues = config.validate()
    if issues:
        print("Issues found:")
        for issue in issues:
            print(f"   - {issue}")
    else:
        print("Configuration valid!")
