import logging

class Reporter:
    """ 
    Class that handles all printing of info/warning/errors to the screen.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)

            logger = logging.getLogger("BiologicalDisturbanceAgent")
            logger.setLevel(logging.INFO)

            if not logger.handlers:  # avoid duplicate handlers
                handler = logging.StreamHandler()
                formatter = logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(message)s",
                    datefmt="%H:%M:%S"
                )
                handler.setFormatter(formatter)
                logger.addHandler(handler)

            logger.propagate = False
            cls._instance.logger = logger

        return cls._instance

    def report(self, msg, level="INFO"):
        if level == "INFO":
            self.logger.info(msg)
        elif level == "WARNING":
            self.logger.warning(msg)
        elif level == "ERROR":
            self.logger.error(msg)
        elif level == "DEBUG":
            self.logger.debug(msg)
        else:
            self.logger.log(level, msg)

    def set_level(self, level):
        """ Change verbosity, e.g. ``Reporter().set_level("WARNING")`` to silence per-event output. """
        self.logger.setLevel(level)
