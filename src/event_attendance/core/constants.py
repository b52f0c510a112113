"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_WINDOW_HOURS = 8
MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
DEFAULT_ATTENDANCE_LIMIT = 500

SESSION_NOT_ACCEPTING_REASON = "session not accepting this scan type"

QR_STUDENT_PREFIX = "DTP:student:"
QR_SESSION_PREFIX = "DTP:session:"

MAX_STUDENT_NAME_LENGTH = 100
MAX_PROGRAM_LENGTH = 100
MIN_STUDENT_YEAR = 1
MAX_STUDENT_YEAR = 5
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
