"""Skip re-running commands whose watched files have not changed."""

from mayberun.index import CheckResult, check_glob, write_glob

__all__ = ["CheckResult", "check_glob", "write_glob"]
__version__ = "0.1.0"
