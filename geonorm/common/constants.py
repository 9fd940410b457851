"""Application constants."""

STAGES = (
    "normalise",
    "bathymetry",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20

# Zero-based position of the delimiter in a degrees-minutes sample such as 40°49.20'.
DELIMITER_SAMPLE_INDEX = 2

FLAG_ZONE_OVERLAP = "ZONE_OVERLAP"

DEFAULT_DEPTH_BREAKPOINTS = (
    0.0,
    -30.0,
    -55.0,
    -75.0,
    -90.0,
    -120.0,
    -150.0,
    -180.0,
    -780.0,
    -1380.0,
    -1980.0,
    -2580.0,
    -3180.0,
    -3780.0,
    -4380.0,
    -4980.0,
)

WGS84_EPSG = 4326

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "record_id",
    "event",
    "status",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
