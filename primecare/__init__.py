"""
PrimeCare warranty lifecycle backend
"""
