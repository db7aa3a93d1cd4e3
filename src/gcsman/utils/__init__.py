"""Utility modules for gcsman."""
