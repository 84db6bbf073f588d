"""Attachment storage for SealFlow"""
