"""
Core business logic for swing analytics.

This module is framework-agnostic - it doesn't import FastAPI or any
storage concerns. Data comes in fully materialized and results go out
fully computed, so everything here can be tested in isolation.
"""
