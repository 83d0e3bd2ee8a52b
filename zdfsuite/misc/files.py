"""
Utilities for interfacing with files.
This includes helper functions for naming files without conflicts, and convenience
wrappers for file writing. :mod:`zdfsuite` stores frames and object state in the
`HDF5 filetype <https://hdfgroup.org/solutions/hdf5>`_, as it is fast, compact, and
handles the nested groups that a settings bracket needs.
This uses the :mod:`h5py` `module <https://h5py.org>`_.
"""

import os
import re

import h5py
import numpy as np


def _max_numeric_id(path, name, extension=None, digit_count=5):
    """
    Obtains the maximum numeric identifier ``id`` for the
    file like ``path/name_id.extension``.

    Parameters
    ----------
    path
        See :meth:`generate_path`.
    name
        See :meth:`generate_path`.
    extension
        See :meth:`generate_path`.
    digit_count
        See :meth:`generate_path`.

    Returns
    -------
    max_numeric_id : int
         The maximum numeric identifier of the specified file or -1 if no file with
         ``name`` in ``path`` could be found.
    """
    conflict_regex = r"^{}_(\d{{{}}})".format(re.escape(name), digit_count)
    if extension is not None:
        conflict_regex += r"\.{}$".format(re.escape(extension))

    max_numeric_id = -1
    for name_ in os.listdir(path):
        match = re.search(conflict_regex, name_)
        if match is not None:
            max_numeric_id = max(int(match.group(1)), max_numeric_id)

    return max_numeric_id


def generate_path(path, name, extension=None, digit_count=5):
    """
    Generate a file path like ``path/name_id.extension``
    where ``id`` is a unique numeric identifier.

    Parameters
    ----------
    path : str
        Top level directory to create the file in.
        If ``path`` does not exist, it and nonexistent
        parent directories will be created.
    name : str
        Identifier for the file. This should not contain underscores.
    extension : str or None
        The extension to append to the file name, not including the ``.`` separator.
        If ``None``, no extension will be added.
    digit_count : int
        The number of digits to use in the numeric identifier.

    Returns
    -------
    file_path : str
        The full path requested.

    Notes
    -----
    This function is not thread safe.
    """
    path = os.path.abspath(path)
    os.makedirs(path, exist_ok=True)

    max_numeric_id = _max_numeric_id(
        path, name, extension=extension, digit_count=digit_count
    )
    name_format = "{{}}_{{:0{}d}}".format(digit_count)
    name_augmented = name_format.format(name, max_numeric_id + 1)
    if extension is not None:
        name_augmented = "{}.{}".format(name_augmented, extension)

    return os.path.join(path, name_augmented)


def read_h5(file_path, decode_bytes=True):
    """
    Read data from an h5 file into a dictionary.
    Groups are returned as nested dictionaries.

    Parameters
    ----------
    file_path : str
        Full path to the file to read the data from.
    decode_bytes : bool
        Whether or not objects with type `bytes` should be decoded.
        By default HDF5 writes strings as bytes objects; this functionality
        will make strings read back from the file `str` type.

    Returns
    -------
    data : dict
        Dictionary of the data stored in the file.
    """
    def recurse(group):
        data = {}

        for key in group.keys():
            if isinstance(group[key], h5py.Group):
                data[key] = recurse(group[key])
            else:
                data_ = group[key][()]
                if decode_bytes:
                    if isinstance(data_, bytes):
                        data_ = bytes.decode(data_)
                    elif isinstance(data_, np.ndarray) and data_.dtype.kind in ("S", "O"):
                        data_ = np.vectorize(bytes.decode)(data_)
                data[key] = data_

        return data

    with h5py.File(file_path, "r") as file_:
        data = recurse(file_)

    return data


def write_h5(file_path, data, mode="w"):
    """
    Write data in a dictionary to an `h5 file
    <https://docs.h5py.org/en/stable/high/file.html#opening-creating-files>`_.
    Nested dictionaries become groups. Keys with value ``None`` are skipped,
    as HDF5 has no null dataset.

    Parameters
    ----------
    file_path : str
        Full path to the file to save the data in.
    data : dict
        Dictionary of data to save in the file.
    mode : str
        The mode to open the file with. The default ``"w"`` overwrites any existing file.
    """
    def recurse(group, data):
        for key in data.keys():
            if isinstance(data[key], dict):
                new_group = group.create_group(str(key))
                recurse(new_group, data[key])
            elif data[key] is not None:
                group[str(key)] = data[key]

    with h5py.File(file_path, mode) as file_:
        recurse(file_, data)
