"""
Real HTTP integration clients.

These clients communicate with real external systems via HTTP, e.g.:
- the Brevo contacts API for newsletter capture

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients should happen in src/api/services.py only.
"""
