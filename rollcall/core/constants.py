# rollcall/core/constants.py
from datetime import time, timedelta

# A session stays Live for this long after its end time.
# Independent of LATE_ATTENDANCE_LIMIT_MINUTES (check-in lateness).
SESSION_END_BUFFER = timedelta(minutes=10)

# Assumed end of a session whose end time is absent or unreadable.
END_OF_DAY = time(23, 59, 59, 999000)

# Number of sessions shown before the "show N more" control.
SESSION_LIST_DISPLAY_LIMIT = 7
