__version_info__ = (0, 1, 0)
__version__ = '.'.join(str(vi) for vi in __version_info__)
