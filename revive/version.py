__version__ = "0.1.0"
version_tuple = (0, 1, 0)
