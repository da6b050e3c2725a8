"""
Bend meshes along cubic Bezier splines.

The MODEL layer (splinemesh.model) is pure geometry over numpy arrays. The
VIEW layer (splinemesh.view) only adapts its buffers to pyvista.
"""
