"""
Deterministic collaborators for driving the simulation engine in tests.

Provides:
- ScriptedRandom: random source with scripted primary/secondary draws
- GatedSleep: delay provider that blocks each step until released
- FakeClock: monotonic clock that sleeping advances, without real waiting
- Scenarios: pre-built random sources for common outcomes
"""
