"""Document persistence backends"""
