"""Test doubles for the display server and the process table."""
