"""MediGuard attendance package.

Organized by feature modules (hospitals, users, attendance, sync, ...) with a
thin Flask controller layer over service/repository layers. Local storage is
authoritative on the device; the remote store is synchronized best-effort.
"""
