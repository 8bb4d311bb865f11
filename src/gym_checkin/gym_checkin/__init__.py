"""Gym QR check-in package.

Organized by feature modules (camera, scanning, memberships, checkin, ...)
with a thin Flask controller layer on top of plain service objects.
"""
