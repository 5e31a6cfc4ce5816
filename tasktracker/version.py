"""
Version detection for the task tracker.
Returns the released version when patched by CI/CD, otherwise a dev version built from git.
"""

import os
import subprocess
from functools import cache

this_path = os.path.dirname(os.path.realpath(__file__))


def is_official_release() -> bool:
    """Check if this is an official release (version was patched by CI/CD)"""
    from tasktracker import __version__

    return not __version__.startswith("0.0.0")


@cache
def get_version() -> str:
    from tasktracker import __version__

    if is_official_release():
        return __version__

    # we are running from an unreleased dev version
    try:
        env = os.environ.copy()
        # don't walk above the project root looking for a repository
        project_root = os.path.dirname(this_path)
        env["GIT_CEILING_DIRECTORIES"] = os.path.dirname(project_root)

        tag = (
            subprocess.check_output(
                ["git", "describe", "--tags", "--always"],
                stderr=subprocess.STDOUT,
                cwd=this_path,
                env=env,
            )
            .decode()
            .strip()
        )
        status = (
            subprocess.check_output(
                ["git", "status", "--porcelain"],
                stderr=subprocess.STDOUT,
                cwd=this_path,
                env=env,
            )
            .decode()
            .strip()
        )
        dirty = "-dirty" if status else ""
        return f"dev-{tag}{dirty}"
    except Exception:
        pass

    return "dev-unknown"
