"""GrantConfig — well-known paths of an analytics job-service account."""

from __future__ import annotations

from dataclasses import dataclass, field

from .utils import normalize_path

SYSTEM_ROOT = "/system"
JOB_LOG_ROOT = "/system/jobservice/jobs/Usql"

FIXED_PATHS: tuple[str, ...] = (
    "/",
    "/system",
    "/system/jobservice",
    "/system/jobservice/jobs",
    "/system/jobservice/jobs/Usql",
    "/system/compilationservice",
    "/system/compilationservice/jobs",
    "/system/compilationservice/jobs/Usql",
)


@dataclass
class GrantConfig:
    """Paths touched by a grant run."""

    fixed_paths: list[str] = field(default_factory=lambda: list(FIXED_PATHS))
    """Paths that get a default entry up front, when they exist."""

    log_root: str = JOB_LOG_ROOT
    """Root of the year/month/day/hour/minute job-log partitions."""

    propagation_root: str = SYSTEM_ROOT
    """Where the full propagation walk starts."""

    apply_to_files: bool = False
    """Apply file entries to the file itself instead of its directory."""

    def __post_init__(self) -> None:
        self.fixed_paths = [normalize_path(p) for p in self.fixed_paths]
        self.log_root = normalize_path(self.log_root)
        self.propagation_root = normalize_path(self.propagation_root)
