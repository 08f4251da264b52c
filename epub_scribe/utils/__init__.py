"""Logging and file helpers"""
