# core/__init__.py
# Pricing engine, proximity calculator and session lifecycle. No UI imports here.
