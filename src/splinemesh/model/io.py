"""
Input/Output Manager (HDF5)
Handles saving and loading paths to .h5 files.

Only the authored node data is persisted. Curves, samples, source meshes and
bent meshes are derived and rebuilt after loading.
"""
import json
import logging
from importlib.metadata import version, PackageNotFoundError

import h5py
import numpy as np

from splinemesh.model.node import Node
from splinemesh.model.path import Path

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("splinemesh")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class IOManager:
    @staticmethod
    def save_path(path: Path, filepath: str) -> None:
        logger.info(f"Saving path to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION

                grp_path = f.create_group("path")
                grp_path.attrs["is_loop"] = path.is_loop

                nodes = path.nodes
                grp_path.create_dataset("positions", data=np.array([n.position.to_list() for n in nodes]))
                grp_path.create_dataset("directions", data=np.array([n.direction.to_list() for n in nodes]))
                grp_path.create_dataset("ups", data=np.array([n.up.to_list() for n in nodes]))
                grp_path.create_dataset("scales", data=np.array([n.scale.to_list() for n in nodes]))
                grp_path.create_dataset("rolls", data=np.array([n.roll for n in nodes]))

            logger.info(f"Path with {len(nodes)} nodes saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save path: {e}")
            raise e

    @staticmethod
    def load_path(filepath: str) -> Path:
        logger.info(f"Loading path from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                if "path" not in f:
                    raise ValueError(f"File '{filepath}' does not contain a path.")
                grp_path = f["path"]

                positions = grp_path["positions"][:]
                directions = grp_path["directions"][:]
                ups = grp_path["ups"][:]
                scales = grp_path["scales"][:]
                rolls = grp_path["rolls"][:]

                nodes = [
                    Node(position=p, direction=d, up=u, scale=s, roll=float(r))
                    for p, d, u, s, r in zip(positions, directions, ups, scales, rolls)
                ]
                # HDF5 returns numpy bools, convert to native python
                is_loop = bool(grp_path.attrs.get("is_loop", False))

            logger.info(f"Path with {len(nodes)} nodes loaded from: {filepath}")
            return Path(nodes=nodes, is_loop=is_loop)

        except Exception as e:
            logger.exception(f"Failed to load path: {e}")
            raise e

    # ---- JSON HELPERS ----

    @staticmethod
    def path_to_json(path: Path) -> str:
        return json.dumps(path.to_dict())

    @staticmethod
    def path_from_json(data: str) -> Path:
        return Path.from_dict(json.loads(data))
