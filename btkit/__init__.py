"""QR Code generation and raw-mode terminal helpers for Bitcoin tooling."""

__version__ = "0.1.0"
__all__ = ["termio", "qrsegment", "qrecc", "qrmatrix", "qrcode"]