"""
setup.py - this module makes the package installable
"""

from setuptools import setup, find_packages

NAME = "zdfsuite"
VERSION = "0.0.1"
DEPENDENCIES = [
    "numpy",
    "scipy",
    "opencv-python",
    "matplotlib",
    "h5py",
    "tqdm"
]
EXTRAS = {
    "zivid": ["zivid"],
    "test": ["pytest"],
}
DESCRIPTION = ("Package for configuring and capturing high-dynamic-range "
               "3D frames from structured-light cameras.")
AUTHOR = "zdfsuite Developers"

setup(author=AUTHOR,
      description=DESCRIPTION,
      install_requires=DEPENDENCIES,
      extras_require=EXTRAS,
      name=NAME,
      version=VERSION,
      packages=find_packages(include=["zdfsuite", "zdfsuite.*"]),
      python_requires=">=3.8",
      entry_points={
          "console_scripts": [
              "zdf-capture-hdr=zdfsuite.samples.capture_hdr_complete_settings:main",
          ],
      },
)
