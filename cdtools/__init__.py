"""cd-tools: release pull request orchestration for multi-project repositories."""

__version__ = "0.1.0"
