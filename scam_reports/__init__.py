"""Scam report moderation service for Whop communities."""

__all__ = []
