"""Core domain package for channel-mock.

Core contains argument matching, invocation rules and dispatch without any
codec or transport code, so the engine works on any channel that honours the
ports.
"""
