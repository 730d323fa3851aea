"""Core configuration, security and persistence helpers"""
