import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")
SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Path segments used by the public booking routes
RESERVED_USER_SLUGS = frozenset({"bookings"})
RESERVED_MEETING_TYPE_SLUGS = frozenset({"dates"})


def slugify(name: str) -> str:
    """URL-friendly slug: lowercase, runs of other characters become one hyphen."""
    return _NON_SLUG.sub("-", name.lower()).strip("-")


def user_slug(name: str, external_id: str) -> str:
    """Initial public slug for a new host, disambiguated by their identity id."""
    base = slugify(name) or "user"
    suffix = slugify(external_id[-6:])
    if not suffix and base in RESERVED_USER_SLUGS:
        suffix = "host"
    return f"{base}-{suffix}" if suffix else base
