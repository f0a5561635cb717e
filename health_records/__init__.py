"""Personal health records API: reports, vitals and report sharing."""

__version__ = "0.1.0"
