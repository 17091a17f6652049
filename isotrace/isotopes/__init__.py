"""
Adapters around the isotope data (molmass) and the natural isotope pattern
generator (IsoSpecPy)
"""
