"""reposync — bring ChromeOS and Android/ARC source checkouts to a known version."""

__version__ = "0.1.0"
