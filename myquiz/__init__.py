"""
MyQuiz - Multiple-choice quiz session engine.

Runs a quiz from an uploaded CSV question set in one of five play modes
(classic, team, countdown, survival, cerdas cermat). The package provides:
- Question bank loading, validation and shuffling
- A per-mode session state machine
- An in-memory session manager and game loop
- A REST API and a terminal CLI as thin drivers
"""

__version__ = "0.1.0"
