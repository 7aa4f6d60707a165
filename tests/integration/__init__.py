"""
Integration tests for the baggage report relay.

These tests drive the platform entry point with environment-driven
configuration and a moto-mocked SES provider.
"""
