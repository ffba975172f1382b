from . import interview, report, resume, users

__all__ = ["interview", "report", "resume", "users"]
