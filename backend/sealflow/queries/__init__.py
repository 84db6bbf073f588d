"""Read-only application queries for SealFlow"""
