import sys
import logging


class LoggingContext(object):

    """
    A context manager that either builds a logger for a pipeline run or
    passes through a logger the caller already has

    Attributes
    ----------
    logger : logging.Logger
        The logger that output from the run is sent to
    """

    def __init__(self, name, logger=None, log_filename=None):
        """
        If ``logger`` is ``None``, a new logger is created that writes to
        ``log_filename`` or, if that is also ``None``, to stdout.

        Parameters
        ----------
        name : str
            A unique name for the logger (typically the entry point name)

        logger : logging.Logger, optional
           An existing logger to use unchanged within the context

        log_filename : str, optional
            A file to write log output to.  While the context is active,
            stdout and stderr are also redirected to this file.
        """
        self.name = name
        self.logger = logger
        self.log_filename = log_filename
        self.handler = None
        self.saved_stdout = None
        self.saved_stderr = None
        self.existing_logger = logger is not None

    def __enter__(self):
        if self.existing_logger:
            return self.logger

        logger = logging.getLogger(self.name)
        if self.log_filename is None:
            handler = logging.StreamHandler(sys.stdout)
        else:
            handler = logging.FileHandler(self.log_filename)
        handler.setFormatter(EcopathFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
        self.logger = logger
        self.handler = handler

        if self.log_filename is not None:
            self.saved_stdout = sys.stdout
            self.saved_stderr = sys.stderr
            sys.stdout = StreamToLogger(logger, logging.INFO)
            sys.stderr = StreamToLogger(logger, logging.ERROR)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.existing_logger:
            return

        if self.saved_stdout is not None:
            sys.stdout = self.saved_stdout
            sys.stderr = self.saved_stderr
        self.handler.close()
        self.logger.removeHandler(self.handler)


class EcopathFormatter(logging.Formatter):
    """
    A formatter that prints info and error messages bare and prefixes debug
    and warning messages
    """

    debug_fmt = "DEBUG: %(module)s: %(lineno)d: %(msg)s"
    warning_fmt = "WARNING: %(msg)s"
    info_fmt = "%(msg)s"

    def __init__(self, fmt=info_fmt):
        logging.Formatter.__init__(self, fmt)

    def format(self, record):
        if record.levelno == logging.DEBUG:
            fmt = EcopathFormatter.debug_fmt
        elif record.levelno == logging.WARNING:
            fmt = EcopathFormatter.warning_fmt
        else:
            fmt = EcopathFormatter.info_fmt

        # the style object holds the format string that is actually used
        saved_fmt = self._style._fmt
        self._style._fmt = fmt
        try:
            result = logging.Formatter.format(self, record)
        finally:
            self._style._fmt = saved_fmt

        return result


class StreamToLogger(object):
    """
    A file-like object that sends anything written to it to a logger, one
    log record per line
    """

    def __init__(self, logger, log_level=logging.INFO):
        self.logger = logger
        self.log_level = log_level

    def write(self, buf):
        for line in buf.rstrip().splitlines():
            self.logger.log(self.log_level, line.rstrip())

    def flush(self):
        pass
