"""Google OAuth and Calendar integration.

Bookings are mirrored into the host's default connected calendar with a
Google Meet conference. Calendar failures never fail a booking; callers
log and continue.
"""
