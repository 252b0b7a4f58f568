"""Bookings app: availability checks, booking protocol and booking ledger."""
