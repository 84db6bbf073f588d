"""Application statistics for SealFlow"""
