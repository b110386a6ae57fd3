"""Conversational orchestrator for booking medical appointments."""

__version__ = "0.1.0"
