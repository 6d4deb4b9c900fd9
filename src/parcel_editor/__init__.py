"""
Parcel Editor - Interactive map rectangle editor for land parcels
"""

__version__ = "1.0.0"
