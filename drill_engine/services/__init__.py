from drill_engine.services.due import due_drills
from drill_engine.services.leaks import normalize_leak_tag
from drill_engine.services.scheduling import SchedulingPolicy
from drill_engine.services.submission import SubmissionHandler

__all__ = ["SchedulingPolicy", "SubmissionHandler", "due_drills", "normalize_leak_tag"]
