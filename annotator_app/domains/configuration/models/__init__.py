"""Configuration Domain Models"""
