"""Audio subsystem: decoding and device output."""
