"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

MAX_BULK_RECORDS = 1000
MAX_REPORTED_ERRORS = 10
MAX_MISSING_IDS_REPORTED = 5
MAX_TEMPLATE_AREAS = 10

DEFAULT_LUNCH_MINUTES = 30
DEFAULT_WORKING_HOURS = 8

MAX_LUNCH_MINUTES = 180
MAX_PERMISSION_HOURS = Decimal("12")
MAX_PERMISSION_REASON_LENGTH = 500
MAX_MEAL_COUNT = 5
MAX_TRANSPORT = Decimal("50")

SUPPLEMENTARY_CAP_HOURS = Decimal("2")

# Monthly reporting period runs from the 26th to the 25th of the next month.
PERIOD_START_DAY = 26
PERIOD_END_DAY = 25

NO_AREA_LABEL = "Sin área"
