"""Seal application APIs for SealFlow"""
