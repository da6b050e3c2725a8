"""
The VIEW layer adapts bent meshes to PyVista for preview and export.
"""
