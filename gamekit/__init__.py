"""Game runtime helpers: chunk files, polled connections, skeletal animation, line and sprite batches, camera and lighting setup."""

__version__ = "0.1.0"