"""Identity Domain Models"""
