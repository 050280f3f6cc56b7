"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

POINTS_PER_ATTENDEE = 100
POINTS_PER_DROPPED_LINK = 50
POINTS_PER_RECRUIT = 500
POINTS_PER_NICKNAME_SET = 50
POINTS_PER_GAME_HANDLED = 1000

DEFAULT_SUBMISSION_UTC_OFFSET_HOURS = 8
DEFAULT_SUBMISSION_WINDOW_START_HOUR = 5
DEFAULT_SUBMISSION_WINDOW_END_HOUR = 22

DEFAULT_SESSION_MAX_AGE_SECONDS = 24 * 60 * 60
DEFAULT_SESSION_COOKIE_NAME = "guild_session"

DEFAULT_SHIFT_REPORT_MAX_AGE_DAYS = 30
MIN_PASSWORD_LENGTH = 6

DEFAULT_MAINS = (
    ("Dragon Hunt", "Weekly dragon hunting expedition"),
    ("Castle Defense", "Defend the academy castle from invaders"),
    ("Potion Brewing", "Advanced potion crafting session"),
    ("Combat Training", "Sword and magic combat practice"),
    ("Treasure Quest", "Search for ancient magical artifacts"),
    ("Study Hall", "Group study session for magical theory"),
    ("Guild Meeting", "Monthly guild planning and strategy meeting"),
)

DUPLICATE_SUBMISSION_MESSAGE = "You have already submitted attendance for this main today"

# Column widths in database/schema.sql
MAX_MEMBER_CODE_LENGTH = 50
MAX_POSITION_LENGTH = 100
MAX_IP_ADDRESS_LENGTH = 45

# Keeps every count and the weighted total inside BIGINT
MAX_ACTIVITY_COUNT = 1_000_000
