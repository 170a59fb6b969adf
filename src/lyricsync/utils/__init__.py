"""Utility helpers for lyricsync."""
