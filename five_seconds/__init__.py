"""Five Seconds: turn-based party board game core.

Modules:
- board.py: track generation
- questions/: difficulty- and audience-filtered question draws
- engine.py: the turn state machine (pure reducer)
- roster.py: setup validation and mid-game roster edits
- clock.py / session.py: countdown clock and the single-writer game session
- settings.py / persistence.py / server.py: configuration, storage, HTTP
"""

__version__ = "1.0.0"
