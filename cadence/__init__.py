"""Cadence - program scheduling and auto-reschedule service."""
