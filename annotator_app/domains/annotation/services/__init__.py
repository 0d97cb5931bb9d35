"""Annotation Domain Services"""
