"""
Release Watcher - Announce new GitHub releases on Discord.

A Python application that polls a GitHub repository's releases
and posts newly published ones to a Discord webhook, oldest first.
"""

__version__ = "1.0.0"
__author__ = "Grégoire Compagnon"
__email__ = "obeone@obeone.org"
