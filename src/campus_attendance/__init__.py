"""Campus attendance service.

Students prove presence at a class session by submitting a short-lived token
shown on the lecturer's screen; the service admits or rejects each attempt
and keeps at most one attendance record per student and session.
"""

__version__ = "1.0.0"
