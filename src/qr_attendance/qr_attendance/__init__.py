"""QR attendance package.

Single-use, time-boxed QR tokens are issued per worker and action, redeemed at a
scanner and turned into daily attendance records plus an incident audit trail.
Organized by feature modules (tokens, attendance, incidents, ...) with a thin Flask
controller layer over service/repository layers.
"""
