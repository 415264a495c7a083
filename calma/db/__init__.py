"""Database access layer.

Controllers import this package (``from calma import db``) and call the
functions below; each opens a connection from the shared pool.
"""

from calma.db.accounts import (
    account_delete,
    account_get,
    account_get_default,
    account_set_default,
    account_update_tokens,
    account_upsert,
    accounts_count,
    accounts_list,
)
from calma.db.availability import (
    availability_copy_day,
    availability_create,
    availability_delete,
    availability_get,
    availability_list,
    availability_update,
)
from calma.db.bookings import (
    booking_create,
    booking_get,
    booking_reschedule,
    booking_set_status,
    bookings_count_confirmed_for_meeting_type,
    bookings_count_since,
    bookings_for_day,
    bookings_list,
)
from calma.db.core import close_pool, get_pool, get_pool_stats, init_pool, translate_errors
from calma.db.feedback import feedback_archive, feedback_create, feedback_list
from calma.db.meeting_types import (
    meeting_type_create,
    meeting_type_delete,
    meeting_type_get,
    meeting_type_get_by_slug,
    meeting_type_set_default,
    meeting_type_slug_taken,
    meeting_type_update,
    meeting_types_list,
)
from calma.db.users import (
    user_create,
    user_get,
    user_get_by_external_id,
    user_get_by_slug,
    user_slug_taken,
    user_update,
)

__all__ = [
    "account_delete",
    "account_get",
    "account_get_default",
    "account_set_default",
    "account_update_tokens",
    "account_upsert",
    "accounts_count",
    "accounts_list",
    "availability_copy_day",
    "availability_create",
    "availability_delete",
    "availability_get",
    "availability_list",
    "availability_update",
    "booking_create",
    "booking_get",
    "booking_reschedule",
    "booking_set_status",
    "bookings_count_confirmed_for_meeting_type",
    "bookings_count_since",
    "bookings_for_day",
    "bookings_list",
    "close_pool",
    "feedback_archive",
    "feedback_create",
    "feedback_list",
    "get_pool",
    "get_pool_stats",
    "init_pool",
    "meeting_type_create",
    "meeting_type_delete",
    "meeting_type_get",
    "meeting_type_get_by_slug",
    "meeting_type_set_default",
    "meeting_type_slug_taken",
    "meeting_type_update",
    "meeting_types_list",
    "translate_errors",
    "user_create",
    "user_get",
    "user_get_by_external_id",
    "user_get_by_slug",
    "user_slug_taken",
    "user_update",
]
