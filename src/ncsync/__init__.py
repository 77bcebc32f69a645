"""ncsync - unattended supervisor for the Nextcloud command-line sync client."""

__version__ = "2.7.0"
