"""Conversation core: command classification, negotiation and dispatch."""
