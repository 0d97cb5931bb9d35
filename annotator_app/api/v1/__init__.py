"""API v1 Routers"""
