"""Interface to 3D camera hardware."""
import warnings
import datetime

from zdfsuite import __version__
from zdfsuite.misc.files import generate_path, write_h5

class _Picklable:
    """
    Class for hardware objects and configuration records to handle state saving.
    """
    _pickle = []        # Baseline parameters to pickle.
    _pickle_data = []   # Heavy parameters (frames, point clouds).

    def pickle(self, attributes=True, metadata=True):
        """
        Returns a dictionary containing selected attributes of this class.

        Parameters
        ----------
        attributes : bool OR list of str
            If ``False``, pickles only baseline attributes, usually single floats.
            If ``True``, also pickles 'heavy' attributes such as point clouds.
            If ``list of str``, pickles the keys in the given list.
            The chosen attributes should be things that can be written to
            .h5 files: scalars, arrays, and other picklables.
            Lists of picklables (e.g. an HDR settings bracket) become dictionaries
            keyed by their index.
        metadata : bool
            If ``True``, package the dictionary as the
            ``"__meta__"`` value of a superdictionary which also contains:
            ``"__version__"``, the current zdfsuite version,
            ``"__time__"``, the time formatted as a date string, and
            ``"__timestamp__"``, the time formatting as a floating point timestamp.
        """
        recursive_attributes = attributes is True   # Heavy pickling only if True.
        if isinstance(attributes, bool):
            attributes = self._pickle + (self._pickle_data if attributes else [])

        pickled = {}
        pickled["__class__"] = str(self.__class__.__name__)

        for k in attributes:
            if not hasattr(self, k):
                warnings.warn(f"Expected attribute '{k}' not present in {self.__class__.__name__}.")
            else:
                attr = getattr(self, k)

                if hasattr(attr, "pickle"):
                    pickled[k] = attr.pickle(attributes=recursive_attributes, metadata=False)
                elif (
                    isinstance(attr, (list, tuple))
                    and len(attr) > 0
                    and all(hasattr(a, "pickle") for a in attr)
                ):
                    pickled[k] = {
                        str(i): a.pickle(attributes=recursive_attributes, metadata=False)
                        for i, a in enumerate(attr)
                    }
                else:
                    pickled[k] = attr

        if metadata:
            t = datetime.datetime.now()
            return {
                "__version__" : __version__,
                "__time__" : str(t),
                "__timestamp__" : t.timestamp(),
                "__meta__" : pickled
            }
        else:
            return pickled

    def save(self, path=".", name=None, **kwargs):
        """
        Saves the dictionary returned from :meth:`pickle()` to a file like ``"path/name_id.h5"``.

        Parameters
        ----------
        path : str
            Path to directory to save in. Default is current directory.
        name : str OR None
            Name of the save file. If ``None``, will use :attr:`name` + ``'-pickle'``.
        **kwargs
            Passed to :meth:`pickle()` to customize how and what data is saved.

        Returns
        -------
        str
            The file path that the pickled data was saved to.
        """
        if name is None:
            name = self.name + '-pickle'
        file_path = generate_path(path, name, extension="h5")

        write_h5(
            file_path,
            self.pickle(**kwargs)
        )

        return file_path
