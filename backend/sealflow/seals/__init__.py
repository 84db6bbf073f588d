"""Seal registry module for SealFlow"""
