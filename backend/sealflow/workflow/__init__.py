"""Seal application workflow for SealFlow

One state machine (service.ApplicationWorkflow) parameterized by the usage and
creation application kinds defined in kinds.py.
"""
