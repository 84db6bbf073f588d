"""User directory for SealFlow"""
