"""Outbound delivery channels."""

from .webhook import post_webhook

__all__ = ["post_webhook"]
