import ast
import inspect
import os
from configparser import ConfigParser, ExtendedInterpolation, \
    RawConfigParser
from importlib import resources


class EcopathConfigParser:
    """
    A config parser that keeps each config file it reads separately and
    combines them on demand.  Options from "user" config files always take
    precedence over package defaults, regardless of the order in which they
    were added, and the source of every option is retained so the combined
    config can be written out with provenance.

    Attributes
    ----------
    combined : {None, configparser.ConfigParser}
        The combined config options, built lazily

    sources : {None, dict}
        The file each ``(section, option)`` in ``combined`` came from
    """

    def __init__(self):
        """
        Make a new (empty) config parser
        """
        self._configs = dict()
        self._user_configs = dict()
        self.combined = None
        self.sources = None

    def add_user_config(self, filename):
        """
        Add the contents of a user config file.  These options take
        precedence over all others.

        Parameters
        ----------
        filename : str
            The relative or absolute path to the config file
        """
        self._add(filename, user=True)

    def add_from_package(self, package, config_filename):
        """
        Add the contents of a config file that is installed with a package

        Parameters
        ----------
        package : str
            The package where ``config_filename`` is found

        config_filename : str
            The name of the config file to add
        """
        resource = resources.files(package).joinpath(config_filename)
        with resources.as_file(resource) as path:
            self._add(path, user=False)

    def get(self, section, option):
        """
        Get an option value for a given section.

        Parameters
        ----------
        section : str
            The name of the config section

        option : str
            The name of the config option

        Returns
        -------
        value : str
            The value of the config option
        """
        return self._get_combined().get(section, option)

    def getint(self, section, option):
        """ Get an option as an integer """
        return self._get_combined().getint(section, option)

    def getfloat(self, section, option):
        """ Get an option as a float """
        return self._get_combined().getfloat(section, option)

    def getboolean(self, section, option):
        """ Get an option as a boolean """
        return self._get_combined().getboolean(section, option)

    def getoptional(self, section, option, dtype=str):
        """
        Get an option that may be left empty (or be missing entirely).

        Parameters
        ----------
        section : str
            The name of the config section

        option : str
            The name of the config option

        dtype : type, optional
            The type to cast a non-empty value to

        Returns
        -------
        value : object or None
            ``None`` if the option is missing or empty, otherwise the value
            cast to ``dtype``
        """
        combined = self._get_combined()
        if not combined.has_option(section, option):
            return None
        value = combined.get(section, option).strip()
        if value in ['', 'None']:
            return None
        return dtype(value)

    def getexpression(self, section, option):
        """
        Get an option as a python literal (typically a list or dict).  String
        entries must be quoted.

        Parameters
        ----------
        section : str
            The section in the config file

        option : str
            The option in the config file

        Returns
        -------
        result : object
            The evaluated expression
        """
        return ast.literal_eval(self.get(section, option))

    def set(self, section, option, value, user=False):
        """
        Set the value of an option.  The file that called this method is
        recorded as its source.

        Parameters
        ----------
        section : str
            The name of the config section

        option : str
            The name of the config option

        value : str
            The value to set the option to

        user : bool, optional
            Whether the option should take precedence like a user config
            option (e.g. because it came from a command-line flag)
        """
        calling_frame = inspect.stack(context=2)[1]
        filename = os.path.abspath(calling_frame.filename)

        configs = self._user_configs if user else self._configs
        if filename not in configs:
            configs[filename] = RawConfigParser()
        config = configs[filename]
        if not config.has_section(section):
            config.add_section(section)
        config.set(section, option.lower(), value)
        self._reset()

    def write(self, fp, include_sources=True):
        """
        Write the combined config options to the given file pointer.

        Parameters
        ----------
        fp : typing.TextIO
            The file pointer to write to

        include_sources : bool, optional
            Whether to add a comment above each option naming the file it
            came from
        """
        combined = self._get_combined()
        for section in combined.sections():
            fp.write(f'[{section}]\n\n')
            for option, value in combined.items(section=section, raw=True):
                if include_sources:
                    fp.write(f'# source: {self.sources[(section, option)]}\n')
                value = str(value).replace('\n', '\n\t')
                fp.write(f'{option} = {value}\n\n')
            fp.write('\n')

    def combine(self):
        """
        Combine the config files into one.  This is normally handled
        automatically.
        """
        self.combined = ConfigParser(interpolation=ExtendedInterpolation())
        self.sources = dict()
        for configs in [self._configs, self._user_configs]:
            for source, config in configs.items():
                for section in config.sections():
                    if not self.combined.has_section(section):
                        self.combined.add_section(section)
                    for option, value in config.items(section):
                        self.sources[(section, option)] = source
                        self.combined.set(section, option, value)

    def _get_combined(self):
        if self.combined is None:
            self.combine()
        return self.combined

    def _reset(self):
        self.combined = None
        self.sources = None

    def _add(self, filename, user):
        filename = os.path.abspath(filename)
        if not os.path.exists(filename):
            raise FileNotFoundError(f'Config file does not exist: {filename}')
        config = RawConfigParser()
        config.read(filenames=filename)

        if user:
            self._user_configs[filename] = config
        else:
            self._configs[filename] = config
        self._reset()


def get_config(user_config_filenames=None):
    """
    Get the package default config options updated with user config files

    Parameters
    ----------
    user_config_filenames : list of str, optional
        User config files, later files taking precedence over earlier ones

    Returns
    -------
    config : goa_ecopath.config.EcopathConfigParser
        The config options
    """
    config = EcopathConfigParser()
    config.add_from_package('goa_ecopath', 'default.cfg')
    if user_config_filenames is not None:
        for filename in user_config_filenames:
            config.add_user_config(filename)
    return config
