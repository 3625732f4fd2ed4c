"""Hallo Tractor: WhatsApp tractor browsing and negotiation bot."""
