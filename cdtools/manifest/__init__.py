"""Project manifest version writers."""

from cdtools.manifest.updater import ManifestError, update_project_version, update_project_versions

__all__ = [
    "ManifestError",
    "update_project_version",
    "update_project_versions",
]
