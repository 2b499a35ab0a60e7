"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- No newsletter provider API key is configured
- We want to test the chatbot and API end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to src/integrations/contracts/*

Switching to real:
When credentials are provided, src/api/services.py selects the clients/real_http/*
implementations instead.
"""
