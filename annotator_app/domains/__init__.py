"""Domain Packages"""
