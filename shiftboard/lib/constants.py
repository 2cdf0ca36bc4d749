"""Shared constants for the shift board."""

import re

# Settings key holding the rotation blob ({beds, config})
ROTATION_SETTING_KEY = "bed_manager_data"

# Config bounds
MIN_POOL_SIZE, MAX_POOL_SIZE = 1, 50
MIN_INTERVAL_DAYS, MAX_INTERVAL_DAYS = 1, 365
MIN_DISPLAY_COLUMNS, MAX_DISPLAY_COLUMNS = 1, 10

# Status engine
WARNING_WINDOW_DAYS = 2
NO_RECORD_AGE = -1
LABEL_NO_RECORD = "기록 없음"
LABEL_TODAY = "오늘 교체함"

# Routine generator
RECENT_THRESHOLD_HOURS = 48
ROUTINE_HOUR = 9
ROUTINE_TITLE_PREFIX = "베드 커버 정기 교체"

# Checklist markers
UNCHECKED_MARKER = "- [ ]"
CHECKED_MARKER = "- [x]"
CHECKLIST_LINE_RE = re.compile(r'^\s*-\s\[([ xX])\]\s?(.*)$')

# Activity log categories, one append-only collection each
LOG_CATEGORIES = ("pt_room", "shockwave", "bed", "laundry", "changing_room")

DEFAULT_STAFF_COLOR = "#888888"
