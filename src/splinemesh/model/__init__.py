"""
The MODEL layer contains pure data structures and geometry.
It has NO knowledge of rendering (PyVista) or of any editor UI.
It deals with nodes, curves, source meshes and bending.
"""
