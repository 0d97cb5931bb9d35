"""Annotation Domain Repositories"""
