"""Pipeline stages and plumbing for the QR PDF service."""
