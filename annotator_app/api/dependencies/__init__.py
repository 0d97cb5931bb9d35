"""API Dependencies"""
