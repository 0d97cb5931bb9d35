"""Binary asset stores"""
