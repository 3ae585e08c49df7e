"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_QR_EXPIRY_MINUTES = 10
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_VERIFY_TOKEN_MAX_AGE = 60 * 60 * 24

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2
MIN_ADDRESS_LENGTH = 5

QR_PAYLOAD_TYPE = "attendance"
STUDENT_QR_PREFIX = "STUDENT_ID:"

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
EMAIL_TIMEOUT_SECONDS = 10
