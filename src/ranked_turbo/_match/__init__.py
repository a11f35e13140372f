# Area: Match
"""
Match - per-match settlement pipeline.

This package handles:
- Win decision (detector + state machine)
- Double down opt-ins
- Rating settlement and verification
- Publishing results to presentation
- The session object tying them together
"""
