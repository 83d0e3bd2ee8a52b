"""
Captured 3D frames and the in-package HDR merge.
"""
import os
import warnings

import cv2
import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.axes_grid1 import make_axes_locatable

from zdfsuite.hardware import _Picklable
from zdfsuite.hardware.cameras.settings import Settings
from zdfsuite.misc.files import read_h5, write_h5


class Frame(_Picklable):
    """
    A single captured (or merged) 3D frame.

    Attributes
    ----------
    xyz : numpy.ndarray
        Point cloud of shape ``(height, width, 3)`` in millimeters.
        Invalid points are ``nan``.
    rgb : numpy.ndarray
        Color image of shape ``(height, width, 3)`` and type ``uint8``.
    contrast : numpy.ndarray
        Fringe contrast of shape ``(height, width)``. Higher is better.
    settings : list of Settings
        The settings that produced this frame, in capture order.
        A merged HDR frame holds the full bracket.
    name : str
        Identifier used by :meth:`~zdfsuite.hardware._Picklable.save()`.
    """
    _pickle = ["name", "settings"]
    _pickle_data = ["xyz", "rgb", "contrast"]

    def __init__(self, xyz, rgb, contrast, settings=None, name="frame"):
        self.xyz = np.asarray(xyz, dtype=float)
        self.rgb = np.asarray(rgb, dtype=np.uint8)
        self.contrast = np.asarray(contrast, dtype=float)

        if self.xyz.ndim != 3 or self.xyz.shape[2] != 3:
            raise ValueError(f"Expected xyz of shape (height, width, 3). Found {self.xyz.shape}.")
        if self.rgb.shape != self.xyz.shape:
            raise ValueError(f"Expected rgb of shape {self.xyz.shape}. Found {self.rgb.shape}.")
        if self.contrast.shape != self.shape:
            raise ValueError(f"Expected contrast of shape {self.shape}. Found {self.contrast.shape}.")

        if settings is None:
            settings = []
        elif isinstance(settings, Settings):
            settings = [settings]
        self.settings = list(settings)

        self.name = str(name)

    @property
    def shape(self):
        """``(height, width)`` of the frame."""
        return self.xyz.shape[:2]

    @property
    def depth(self):
        """The z channel of :attr:`xyz`."""
        return self.xyz[:, :, 2]

    @property
    def valid(self):
        """Boolean mask of points with finite coordinates."""
        return np.all(np.isfinite(self.xyz), axis=2)

    def save(self, path):
        """
        Saves the frame. The format is chosen by the file extension:

        -   ``.zdf``: point cloud, color, contrast and the settings bracket,
            stored in an HDF5 container.
        -   ``.png``: the color image only.

        An existing file at ``path`` is overwritten.

        Parameters
        ----------
        path : str
            Destination file.

        Raises
        ------
        ValueError
            If the extension is not recognized.
        OSError
            If the file cannot be written.
        """
        extension = os.path.splitext(str(path))[1].lower()

        if extension == ".zdf":
            write_h5(path, self.pickle(attributes=True, metadata=True))
        elif extension == ".png":
            if not cv2.imwrite(str(path), cv2.cvtColor(self.rgb, cv2.COLOR_RGB2BGR)):
                raise OSError(f"Could not write '{path}'.")
        else:
            raise ValueError(f"Unrecognized frame extension '{extension}'; use .zdf or .png.")

    @classmethod
    def load(cls, path):
        """
        Loads a frame written by :meth:`save()` in the ``.zdf`` format.

        Parameters
        ----------
        path : str
            Source file.

        Returns
        -------
        Frame
            The loaded frame.
        """
        data = read_h5(path)
        meta = data["__meta__"] if "__meta__" in data else data

        bracket = meta.get("settings", {})
        settings = [Settings.from_dict(bracket[k]) for k in sorted(bracket, key=int)]

        return cls(
            meta["xyz"],
            meta["rgb"],
            meta["contrast"],
            settings=settings,
            name=meta.get("name", "frame"),
        )

    def plot(self, title="Frame", axs=None, cbar=True):
        """
        Plots the depth map beside the color image.

        Parameters
        ----------
        title : str
            Title for the figure.
        axs : (matplotlib.pyplot.axis, matplotlib.pyplot.axis) OR None
            Axes to plot upon. If ``None``, a new figure is made.
        cbar : bool
            Also plot a depth colorbar.

        Returns
        -------
        (matplotlib.pyplot.axis, matplotlib.pyplot.axis)
            Axes of the depth and color plots.
        """
        if axs is None:
            fig, axs = plt.subplots(1, 2, figsize=(16, 6))
        else:
            fig = axs[0].figure

        im = axs[0].imshow(self.depth)
        axs[0].set_title(f"{title}: depth [mm]")
        if cbar:
            cax = make_axes_locatable(axs[0]).append_axes("right", size="2%", pad=0.05)
            fig.colorbar(im, cax=cax, orientation="vertical")

        axs[1].imshow(self.rgb)
        axs[1].set_title(f"{title}: color")

        for ax in axs:
            ax.set_xlabel("Image $x$ [pix]")
            ax.set_ylabel("Image $y$ [pix]")

        return axs


def merge_hdr(frames, name="hdr"):
    """
    Merges frames captured with different settings into one High Dynamic Range frame.

    For every pixel, the point from the frame with the highest contrast
    (among frames where the point is valid) is kept, along with that frame's color.
    Pixels which are invalid in every frame stay invalid, and take their color
    from the first frame.

    Parameters
    ----------
    frames : list of Frame
        Frames of identical shape, in capture order.
    name : str
        Name of the merged frame.

    Returns
    -------
    Frame
        The merged frame, whose :attr:`~Frame.settings` is the concatenation of
        the inputs' settings.
    """
    if len(frames) == 0:
        raise ValueError("Cannot merge an empty list of frames.")
    shape = frames[0].shape
    for frame in frames:
        if frame.shape != shape:
            raise ValueError(f"Cannot merge frames of shape {frame.shape} and {shape}.")

    # Invalid points compete with -inf contrast so that any valid point wins.
    contrast = np.stack([
        np.where(frame.valid, frame.contrast, -np.inf) for frame in frames
    ])
    best = np.argmax(contrast, axis=0)
    valid_any = np.isfinite(np.max(contrast, axis=0))
    best[~valid_any] = 0

    rows, cols = np.indices(shape)
    xyz = np.stack([frame.xyz for frame in frames])[best, rows, cols]
    rgb = np.stack([frame.rgb for frame in frames])[best, rows, cols]
    merged_contrast = np.stack([frame.contrast for frame in frames])[best, rows, cols]

    xyz[~valid_any] = np.nan
    merged_contrast[~valid_any] = 0

    if not np.any(valid_any):
        warnings.warn("HDR frame contains no valid points.")

    settings = []
    for frame in frames:
        settings += frame.settings

    return Frame(xyz, rgb, merged_contrast, settings=settings, name=name)
