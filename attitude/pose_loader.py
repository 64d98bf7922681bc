import logging
import os
from typing import List, Optional
import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

# Accepted spellings for each quaternion component, in [w, x, y, z] order
COLUMN_ALIASES = {
    'w': ['w', 'qw', 'quat_w'],
    'x': ['x', 'qx', 'quat_x'],
    'y': ['y', 'qy', 'quat_y'],
    'z': ['z', 'qz', 'quat_z'],
}


class PoseLoader:
    """
    Loads raw attitude readings from CSV.

    Expected columns: w, x, y, z (or qw, qx, qy, qz), optional timestamp.
    Values are raw sensor-frame quaternions; no conversion is applied here.
    """
    def __init__(self, delimiter: str = ','):
        self.delimiter = delimiter

    def _resolve_columns(self, df: pd.DataFrame, path: str) -> List[str]:
        lowered = {c.strip().lower(): c for c in df.columns}
        resolved = []
        for component, aliases in COLUMN_ALIASES.items():
            match = next((lowered[a] for a in aliases if a in lowered), None)
            if match is None:
                raise ValueError(f"Missing quaternion column '{component}' in {os.path.basename(path)}. "
                                 f"Found columns: {list(df.columns)}")
            resolved.append(match)
        return resolved

    def read_frame(self, path: str) -> pd.DataFrame:
        df = pd.read_csv(path, sep=self.delimiter)
        if df.empty:
            raise ValueError(f"No pose rows found in {path}")
        columns = self._resolve_columns(df, path)
        out = df[columns].astype(float)
        out.columns = ['w', 'x', 'y', 'z']
        if 'timestamp' in df.columns:
            out.insert(0, 'timestamp', df['timestamp'].astype(float))
        return out

    def load_poses(self, path: str) -> np.ndarray:
        """
        Returns:
            N x 4 array of [w, x, y, z]
        """
        df = self.read_frame(path)
        quats = df[['w', 'x', 'y', 'z']].values
        log.debug("Loaded %d poses from %s", len(quats), path)
        return quats

    def load_timestamps(self, path: str) -> Optional[np.ndarray]:
        df = self.read_frame(path)
        if 'timestamp' not in df.columns:
            return None
        return df['timestamp'].values

    def load_calibration_poses(self, path: str) -> np.ndarray:
        """
        Loads the three calibration poses (up, forward, right), in file order.
        """
        quats = self.load_poses(path)
        if len(quats) != 3:
            raise ValueError(f"Calibration needs exactly 3 poses (up, forward, right), "
                             f"{path} has {len(quats)}")
        return quats


def save_poses(path: str, quaternions: np.ndarray, timestamps: Optional[np.ndarray] = None):
    """Writes an N x 4 [w, x, y, z] array with the same column layout PoseLoader reads."""
    df = pd.DataFrame(np.asarray(quaternions, dtype=float), columns=['w', 'x', 'y', 'z'])
    if timestamps is not None:
        df.insert(0, 'timestamp', np.asarray(timestamps, dtype=float))
    df.to_csv(path, index=False)
