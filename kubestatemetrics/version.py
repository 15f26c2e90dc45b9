"""Build and runtime version information."""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass

RELEASE = "UNKNOWN"
COMMIT = "UNKNOWN"
BUILD_DATE = ""


@dataclass(frozen=True)
class Version:
    """Version details of this build and the interpreter running it."""

    git_commit: str
    build_date: str
    release: str
    python_version: str
    compiler: str
    platform: str

    def __str__(self) -> str:
        program = os.path.basename(sys.argv[0]) if sys.argv else ""
        return (
            f"{program}/{self.release} ({self.platform}) "
            f"kube-state-metrics/{self.git_commit}"
        )


def get_version() -> Version:
    """Return the version of this build."""
    return Version(
        git_commit=COMMIT,
        build_date=BUILD_DATE,
        release=RELEASE,
        python_version=_platform.python_version(),
        compiler=_platform.python_implementation(),
        platform=f"{sys.platform}/{_platform.machine()}",
    )