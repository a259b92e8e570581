"""Core constants for lazycd.

This module defines constants used throughout the application:
- Configuration directory layout
- Environment variables
- Limits for conflict resolution
"""

# ============================================================================
# Configuration Layout
# ============================================================================

#: Application directory name under ~/.config
APP_NAME = "lazycd"

#: Default config root, relative to the user's home directory
DEFAULT_CONFIG_SUBDIR: tuple[str, ...] = (".config", APP_NAME)

#: Subdirectory holding one JSON record per job
JOBS_DIRNAME = "jobs"

#: Subdirectory holding per-job trash areas
TRASH_DIRNAME = "trash"

#: Subdirectory holding per-job backups of overwritten destinations
BACKUPS_DIRNAME = "backups"

#: Persisted shelf/target state
STATE_FILENAME = "state.json"

#: Extension of job record files
JOB_FILE_SUFFIX = ".json"

# ============================================================================
# Environment Variables
# ============================================================================

#: Overrides the config root
CONFIG_DIR_ENV = "LAZYCD_CONFIG_DIR"

#: Enables debug output when set to 1/true/yes
DEBUG_ENV = "LAZYCD_DEBUG"

# ============================================================================
# Limits
# ============================================================================

#: Maximum number of "<name> (n)<ext>" candidates tried by the rename policy
MAX_RENAME_ATTEMPTS = 9999

#: Number of jobs shown by default when listing history
DEFAULT_RECENT_JOBS = 10
