"""
Simulation components of glifcond.
"""
