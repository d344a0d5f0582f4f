from .ids import new_op_id, new_plan_id, new_uuid
from .log import LOGGER_NAME, setup_logger
from .names import (
    INDEX_NAME,
    JSON_CONTENT_TYPE,
    MANIFEST_SUFFIX,
    is_manifest_key,
    package_name_from_key,
)
from .time import (
    MANIFEST_TIME_FORMAT,
    normalize_dt,
    now_utc,
    parse_manifest_time,
)

__all__ = [
    "new_uuid",
    "new_plan_id",
    "new_op_id",
    "LOGGER_NAME",
    "setup_logger",
    "INDEX_NAME",
    "JSON_CONTENT_TYPE",
    "MANIFEST_SUFFIX",
    "is_manifest_key",
    "package_name_from_key",
    "MANIFEST_TIME_FORMAT",
    "now_utc",
    "parse_manifest_time",
    "normalize_dt",
]
