"""
Handshake Camera - Automatic photo-on-handshake kiosk.

Watches a live camera feed with MediaPipe hand tracking, detects when two
hands come close together ("handshake") and captures a still photo,
rate-limited by a cooldown so one handshake yields one photo.
"""

__version__ = "1.0.0"
