"""
Demo Application
================
Bends a tube along an S-shaped path, tapering and twisting it like a
tentacle, and optionally shows the result.

Why is this file needed?
------------------------
It wires the pieces together the way a host application would:
1. A Path owns the nodes and notifies the benders when it changes.
2. One MeshBender per curve bends the same source snapshot.
3. The output buffers go to the renderer (pyvista here).
"""
import argparse
import logging
from typing import List, Optional, Sequence

from splinemesh.config import get_resource_path
from splinemesh.logging_config import setup_logging
from splinemesh.model.mesh_bender import MeshBender, BentMesh
from splinemesh.model.mesh_primitives import circle_profile, extrude_profile
from splinemesh.model.node import Node
from splinemesh.model.path import Path
from splinemesh.model.source_mesh import SourceMesh

logger = logging.getLogger(__name__)


def build_demo_path() -> Path:
    return Path(nodes=[
        Node(position=(0.0, 0.0, 0.0), direction=(4.0, 0.0, 0.0)),
        Node(position=(10.0, 0.0, 5.0), direction=(14.0, 0.0, 5.0)),
        Node(position=(20.0, 3.0, 0.0), direction=(24.0, 3.0, 0.0)),
    ])


def bend_along_curves(path: Path, source: SourceMesh) -> List[BentMesh]:
    """Bend the source once per curve, like a pipe made of one segment per curve."""
    results = []
    for curve in path.curves:
        bender = MeshBender(source)
        bender.set_interval(curve)
        results.append(bender.compute())
    return results


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Bend a tube along a spline.")
    parser.add_argument("--show", action="store_true", help="open a pyvista window with the result")
    parser.add_argument("--per-curve", action="store_true", help="bend one copy of the tube per curve instead of one over the whole path")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--log-file", help="also write logs to this file, relative to the project root")
    args = parser.parse_args(argv)

    log_file = get_resource_path(args.log_file) if args.log_file else None
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=log_file)

    path = build_demo_path()
    path.apply_scale_roll_ramp(start_scale=1.0, end_scale=0.2, start_roll=0.0, end_roll=180.0)

    tube = extrude_profile(circle_profile(radius=1.0, n_segments=16), length=4.0, rings=20)
    source = SourceMesh.build(tube)

    if args.per_curve:
        meshes = bend_along_curves(path, source)
    else:
        bender = MeshBender(source)
        bender.set_path_interval(path)
        meshes = [bender.compute()]

    logger.info(
        f"Path length {path.length:.3f} over {len(path.curves)} curves; "
        f"bent {sum(bent.vertex_count for bent in meshes)} vertices in {len(meshes)} meshes, "
        f"{len(source.sample_groups)} curve samples per mesh."
    )

    if args.show:
        from splinemesh.view.preview import show_bent_meshes
        show_bent_meshes(meshes, path)


if __name__ == "__main__":
    main()
