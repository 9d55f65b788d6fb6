"""
Scheduling Domain

Decides whether a requested appointment is legal and whether its slot still
has room.

- time_calculator.py      # Slot label parsing ("9:00 AM - 11:00 AM" -> start time)
- temporal_validator.py   # Not-in-the-past and minimum lead time checks
- availability_service.py # Per-slot capacity check and day summary
- slot_lock.py            # Optional per-slot lock around check-then-insert
- policy.py               # Business settings resolved into a SchedulingPolicy
- repository.py           # Booking and reschedule request queries
- service.py              # Booking, cancellation and reschedule workflows
- router.py               # Public and back-office endpoints
"""
