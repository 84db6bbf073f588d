"""Shared API helpers for SealFlow"""
