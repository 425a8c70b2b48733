"""Heartbeat-driven scheduling runtime."""
