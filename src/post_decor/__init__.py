"""Sticker decorations on shared post images."""
