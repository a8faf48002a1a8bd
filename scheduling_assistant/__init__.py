"""Scheduling Assistant - chat-driven appointment booking API."""
