"""
Scheduling Services Module

Core availability logic:
- Open intervals from working hours and breaks (schedule.py)
- Conflict detection (overlap.py)
- Slot generation (availability.py)
"""
