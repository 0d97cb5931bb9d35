"""Annotation Domain Models"""
