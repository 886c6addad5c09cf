"""
StudyCal: merges assignment feeds, calendar events and manual entries into
one per-day calendar and plans study blocks ahead of due dates.
"""
