"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_GEOFENCE_RADIUS_METERS = 15
GPS_TOLERANCE_METERS = 15
LOCATION_TIMEOUT_SECONDS = 10.0

CHECK_IN_DEADLINE_HOUR = 8
CHECK_IN_DEADLINE_MINUTE = 5
CHECK_OUT_DEADLINE_HOUR = 17

REPORT_INTERVAL_DAYS = 7
SUMMARY_SAMPLE_LIMIT = 50
DEVICE_SUFFIX_LENGTH = 6

REMOTE_TIMEOUT_SECONDS = 10.0

HOSPITALS_KEY = "mediguard_hospitals"
USERS_KEY = "mediguard_users"
ATTENDANCE_KEY = "mediguard_attendance"
DEVICE_ID_KEY = "mediguard_device_id"

HOSPITALS_TABLE = "hospitals"
USERS_TABLE = "users"
ATTENDANCE_TABLE = "attendance_records"
